from .retrieve import Retriever, retrieve

__all__ = ["Retriever", "retrieve"]
