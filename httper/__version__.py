__title__ = "httper"
__description__ = "An asynchronous HTTP(S) client with single-use request builders."
__version__ = "0.3.0"
