"""candle-core: candle series, timeframe resampling and stochastic indicators."""
