"""blorbgen: Blorb resource packager."""

__version__ = "0.32.0"
