from .assignment import CameraAssignment, build_camera_segment_index, cameras_on_segments

__all__ = ["CameraAssignment", "build_camera_segment_index", "cameras_on_segments"]
