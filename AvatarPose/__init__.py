"""Avatar/camera pose controller fusing device orientation, manual rotation and commands."""

__version__ = "0.1.0"
