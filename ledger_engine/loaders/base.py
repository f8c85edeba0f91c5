# ledger_engine/loaders/base.py
from abc import ABC, abstractmethod


class BaseLoader(ABC):
    def __init__(self, config):
        self.config = config

    @abstractmethod
    def load(self, file_path):
        """
        Yield NewRecord instances read from file_path.
        """
        pass
