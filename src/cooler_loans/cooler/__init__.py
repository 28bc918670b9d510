from cooler_loans.cooler.reader import ChainReader, Web3ChainReader

__all__ = (
    "ChainReader",
    "Web3ChainReader",
)
