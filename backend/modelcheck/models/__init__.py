from modelcheck.models.enums import Modality, ModelType, Provider, TestMode, TestStatus

__all__ = ["Modality", "ModelType", "Provider", "TestMode", "TestStatus"]
