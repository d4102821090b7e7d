"""OBJ mesh loading, trackball rotation, file browsing and render state for a 3D model viewer."""

__version__ = "0.1.0"
__all__ = ["filebrowser", "mesh", "trackball", "viewer"]