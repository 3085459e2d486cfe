"""Transformers from raw feed records to bus lane model objects"""
from .feature_transformer import CameraPoint, FeatureTransformer, RoadSegment

__all__ = ["CameraPoint", "FeatureTransformer", "RoadSegment"]
