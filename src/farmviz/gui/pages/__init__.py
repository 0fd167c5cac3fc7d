from .upload_page import UploadPage
from .map_page import MapPage
from .detail_page import DetailPage

__all__ = [
    "UploadPage",
    "MapPage",
    "DetailPage",
]
