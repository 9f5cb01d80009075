# Disease detection module
from crop_support.ml.prediction import DiseaseDetector

__all__ = ['DiseaseDetector']
