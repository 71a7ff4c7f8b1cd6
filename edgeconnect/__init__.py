"""Device connectivity instructions and activity reporting for an IoT edge."""

__version__ = "0.1.0"
