"""Post operations over a key-value store, keyed by post id."""
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from storage import KeyValueStore

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PostService:
    """Create, read, update and delete posts.

    Args:
        store: Key-value store collaborator. The API passes a
            NullKeyValueStore, which makes every read empty.
        id_factory: Callable producing new post ids (random UUID4 strings)
        clock: Callable producing ISO-8601 timestamps
    """

    def __init__(self, store: KeyValueStore, id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
                 clock: Callable[[], str] = _now):
        self.store = store
        self.id_factory = id_factory
        self.clock = clock

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        now = self.clock()
        post = {
            "id": self.id_factory(),
            "title": data["title"],
            "content": data["content"],
            "createdAt": now,
            "updatedAt": now,
        }
        self.store.put(post["id"], json.dumps(post))
        logger.debug(f"Created post id={post['id']}")
        return post

    def list(self) -> List[Dict[str, Any]]:
        posts = []
        for key in self.store.list():
            post = self.get(key)
            if post is not None:
                posts.append(post)
        return posts

    def get(self, post_id: str) -> Optional[Dict[str, Any]]:
        raw = self.store.get(post_id)
        if raw is None:
            return None
        return json.loads(raw)

    def update(self, post_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Replace a post.

        No existence check is made and createdAt is regenerated rather than
        carried over from a stored post.
        """
        post = {
            "id": post_id,
            "title": data["title"],
            "content": data["content"],
            "createdAt": self.clock(),
            "updatedAt": self.clock(),
        }
        self.store.put(post_id, json.dumps(post))
        logger.debug(f"Updated post id={post_id}")
        return post

    def delete(self, post_id: str) -> None:
        self.store.delete(post_id)
        logger.debug(f"Deleted post id={post_id}")
