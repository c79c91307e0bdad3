"""Version information for TikTok Python SDK"""

__version__ = "0.1.0"
