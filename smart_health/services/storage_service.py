import logging

from supabase import create_client

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class ReportStorage:
    """Medical report files in a Supabase Storage bucket.

    The client is created on first use so the app can boot (and report
    'missing' on /api/health) without Supabase credentials.
    """

    def __init__(self, url: str | None, service_role_key: str | None, bucket: str, client=None):
        self.url = url
        self.service_role_key = service_role_key
        self.bucket = bucket
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self.url and self.service_role_key)

    def _bucket(self):
        if self._client is None:
            if not self.configured:
                raise StorageError(
                    "Missing Supabase credentials. Ensure SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are set."
                )
            self._client = create_client(self.url, self.service_role_key)
            logger.info("Supabase client initialized")
        return self._client.storage.from_(self.bucket)

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        try:
            result = self._bucket().upload(
                path=path,
                file=data,
                file_options={"content-type": content_type, "upsert": "false"},
            )
        except StorageError:
            raise
        except Exception as exc:
            logger.error("Supabase upload failed for %s: %s", path, exc)
            raise StorageError("File upload failed") from exc
        # storage3 returns an UploadResponse with .path; older releases return the raw response
        return getattr(result, "path", None) or path

    def signed_url(self, path: str, expires_in: int) -> str:
        try:
            data = self._bucket().create_signed_url(path, expires_in)
        except StorageError:
            raise
        except Exception as exc:
            logger.error("Signed URL generation failed for %s: %s", path, exc)
            raise StorageError("Failed to generate signed URL") from exc
        url = data.get("signedURL") or data.get("signedUrl")
        if not url:
            raise StorageError("Failed to generate signed URL")
        return url

    def remove(self, path: str) -> None:
        try:
            self._bucket().remove([path])
        except StorageError:
            raise
        except Exception as exc:
            logger.error("Supabase delete failed for %s: %s", path, exc)
            raise StorageError("File delete failed") from exc
