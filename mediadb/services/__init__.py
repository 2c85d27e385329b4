"""
Use cases behind the media routers: range-aware file streaming and the
library listings (music, videos, gallery, album art, uploads).
"""
