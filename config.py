"""
Configuration constants for the forecasting models.
"""

# Time axis
TIME_TOLERANCE = 1e-8  # Two time values closer than this are the same period

# Moving averages
WEIGHT_SUM_TOLERANCE = 1e-8  # Weights summing this close to one are used as given

# Smoothing constant search
DEFAULT_SMOOTHING_CONSTANT_TOLERANCE = 0.001
MAX_SMOOTHING_CONSTANT_TOLERANCE = 0.5
SMOOTHING_CONSTANT_RANGE = (0.0, 1.0)

# Seasonal models
TRIPLE_SMOOTHING_CYCLES = 2  # Full cycles needed to seed level, trend and indices

# Model selection
DEFAULT_MOVING_AVERAGE_PERIOD = 3
MAX_POLYNOMIAL_ORDER = 10
SELECTION_TOLERANCE = 1e-8

# Seasonality detection
AUTO_MAX_PERIOD = 400  # Search up to this period
AUTO_MIN_CYCLES = 2    # Require at least this many cycles in history

# Logging
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
