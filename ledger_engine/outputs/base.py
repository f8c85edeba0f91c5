# ledger_engine/outputs/base.py
from abc import ABC, abstractmethod


class BaseOutput(ABC):
    @abstractmethod
    def write(self, store, year, month):
        """Export one month of the ledger to the chosen sink; return the paths written."""
        pass
