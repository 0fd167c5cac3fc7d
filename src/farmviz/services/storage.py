from __future__ import annotations

from dataclasses import dataclass

from farmviz.core.models import CandidateFile
from farmviz.services.http import JsonHttpClient, MultipartFile, UrlLibJsonHttpClient
from farmviz.util.errors import DataError, NetworkError

CLOUDINARY_UPLOAD_URL = "https://api.cloudinary.com/v1_1/{cloud_name}/image/upload"


@dataclass(frozen=True)
class StoredImage:
    url: str
    id: str


class ImageStorage:
    def upload(self, candidate: CandidateFile) -> StoredImage:
        raise NotImplementedError


class CloudinaryStorage(ImageStorage):
    """Unsigned uploads through a public upload preset."""

    def __init__(
        self,
        cloud_name: str,
        upload_preset: str,
        folder: str = "farm-crops",
        http_client: JsonHttpClient | None = None,
    ) -> None:
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.folder = folder
        self._http = http_client or UrlLibJsonHttpClient()

    @property
    def upload_url(self) -> str:
        return CLOUDINARY_UPLOAD_URL.format(cloud_name=self.cloud_name)

    def upload(self, candidate: CandidateFile) -> StoredImage:
        try:
            content = candidate.path.read_bytes()
        except OSError as exc:
            raise NetworkError(f"Could not read {candidate.name}: {exc}") from exc

        data = self._http.post_multipart(
            self.upload_url,
            fields={"upload_preset": self.upload_preset, "folder": self.folder},
            files=[MultipartFile("file", candidate.name, candidate.mime_type, content)],
        )
        url = data.get("secure_url")
        public_id = data.get("public_id")
        if not isinstance(url, str) or not url:
            raise DataError("Upload response is missing secure_url.")
        if not isinstance(public_id, str) or not public_id:
            raise DataError("Upload response is missing public_id.")
        return StoredImage(url=url, id=public_id)
