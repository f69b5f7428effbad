from abc import ABC, abstractmethod

from compat_report.models.report import ReportRequest


class PromptBuilder(ABC):
    """Turns a report request into the system instruction and user payload sent to the model"""

    @abstractmethod
    def build_system(self) -> str:
        pass

    @abstractmethod
    def build(self, request: ReportRequest) -> str:
        pass
