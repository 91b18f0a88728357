"""fundfolio - portfolio valuation and time-series engine for investment funds."""

__version__ = "0.1.0"
