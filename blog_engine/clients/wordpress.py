import base64
import logging
from typing import Dict, Optional, Tuple
import httpx

from ..errors import ConfigurationError, PublishError
from ..schemas import PublishPayload, PublishedDocument

logger = logging.getLogger(__name__)

STATUS_REASONS = {
    401: "auth",
    403: "forbidden",
    404: "not_found",
}


class WordPressClient:
    """Async client for the WordPress REST API."""

    def __init__(self, wp_url: Optional[str], wp_user: Optional[str], wp_app_password: Optional[str],
                 timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        if not wp_url:
            self.wp_url = ""
            logger.warning("WordPress URL is missing.")
        else:
            self.wp_url = wp_url.rstrip('/')

        self.wp_user = wp_user
        self.wp_app_password = wp_app_password
        self.timeout = timeout
        self._transport = transport

        if wp_user and wp_app_password:
            auth = f"{wp_user}:{wp_app_password}"
            self.token = base64.b64encode(auth.encode()).decode('utf-8')
            self.headers = {
                "Authorization": f"Basic {self.token}"
            }
        else:
            self.headers = {}
            logger.warning("WordPress credentials missing.")

    def _require_configuration(self):
        if not self.wp_url or not self.headers:
            raise ConfigurationError("Set WP_URL, WP_USER and WP_APP_PASSWORD before publishing")

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self.headers,
            timeout=timeout or self.timeout,
            transport=self._transport,
        )

    def edit_url(self, post_id: int) -> str:
        return f"{self.wp_url}/wp-admin/post.php?post={post_id}&action=edit"

    async def create_draft_document(self, payload: PublishPayload) -> PublishedDocument:
        """
        Create a draft post from a publish payload.

        Raises:
            ConfigurationError: URL or credentials missing
            PublishError: WordPress rejected the request or could not be reached
        """
        self._require_configuration()
        url = f"{self.wp_url}/wp-json/wp/v2/posts"
        data = {
            "title": payload.title,
            "content": payload.html_body,
            "excerpt": payload.excerpt,
            "slug": payload.slug,
            "status": "draft",
            "meta": payload.meta_fields,
        }
        if payload.featured_image_ref and payload.featured_image_ref.media_id:
            data["featured_media"] = payload.featured_image_ref.media_id

        try:
            async with self._client() as client:
                response = await client.post(url, json=data)
        except httpx.HTTPError as e:
            logger.error(f"❌ Error creating post: {e}")
            raise PublishError(f"Could not reach WordPress: {e}", "unknown") from e

        if response.status_code != 201:
            reason = STATUS_REASONS.get(response.status_code, "unknown")
            logger.error(f"❌ Failed to create post: {response.status_code} - {response.text[:300]}")
            raise PublishError(
                f"WordPress returned {response.status_code}: {response.text[:200]}",
                reason,
                response.status_code,
            )

        try:
            body = response.json()
            post_id = body["id"]
            document = PublishedDocument(id=post_id, edit_url=self.edit_url(post_id), preview_url=body.get("link"))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"❌ Unreadable post creation response: {response.text[:300]}")
            raise PublishError(f"WordPress returned 201 without a usable post id: {e}", "unknown", 201) from e
        logger.info(f"✅ Draft post created (ID: {post_id})")

        # Plugins that ignore the REST "meta" field get the values written directly.
        await self.update_post_meta(post_id, payload.meta_fields)
        return document

    async def update_post_meta(self, post_id: int, meta_fields: Dict[str, str]) -> bool:
        """Write SEO meta fields on an existing post. Failures are logged, not raised."""
        if not self.wp_url or not meta_fields:
            return False
        url = f"{self.wp_url}/wp-json/wp/v2/posts/{post_id}"
        try:
            async with self._client() as client:
                response = await client.post(url, json={"meta": meta_fields})
            if response.status_code == 200:
                return True
            logger.warning(f"⚠️ Meta update for post {post_id} returned {response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"⚠️ Meta update for post {post_id} failed: {e}")
        return False

    async def upload_media(self, image_data: bytes, filename: str, alt_text: str = "",
                           title: str = "") -> Tuple[Optional[int], Optional[str]]:
        """Upload image bytes to the media library and return (attachment id, source url)."""
        self._require_configuration()
        url = f"{self.wp_url}/wp-json/wp/v2/media"
        headers = {
            "Content-Type": "image/png" if filename.endswith(".png") else "image/jpeg",
            "Content-Disposition": f'attachment; filename="{filename}"',
        }
        try:
            async with self._client(timeout=60.0) as client:
                response = await client.post(url, headers=headers, content=image_data)
                if response.status_code != 201:
                    logger.error(f"Media upload failed: {response.status_code} - {response.text[:300]}")
                    return None, None
                res_data = response.json()
                media_id = res_data.get('id')
                source_url = res_data.get('source_url')
                await client.post(f"{url}/{media_id}", json={"alt_text": alt_text, "title": title})
        except httpx.HTTPError as e:
            logger.error(f"Media upload error: {e}")
            return None, None

        logger.info(f"✅ Media uploaded to WordPress (ID: {media_id})")
        return media_id, source_url

    async def check_connection(self) -> Dict:
        """Verify the site is reachable and the credentials are accepted."""
        self._require_configuration()
        try:
            async with self._client(timeout=10.0) as client:
                response = await client.get(f"{self.wp_url}/wp-json/wp/v2/users/me")
        except httpx.HTTPError as e:
            return {"success": False, "message": f"Connection failed: {e}"}

        if response.status_code == 200:
            user = response.json()
            return {"success": True, "message": f"Connected as {user.get('name', self.wp_user)}"}
        reason = STATUS_REASONS.get(response.status_code, "unknown")
        return {"success": False, "message": f"WordPress returned {response.status_code}", "reason": reason}
