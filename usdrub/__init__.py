"""USD/RUB exchange rate web service backed by the Central Bank of Russia feed."""

__version__ = "0.1.0"
