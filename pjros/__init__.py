"""Decode serialized ROS 1 and ROS 2 messages into flat lists of named values."""

__version__ = "0.1.0"