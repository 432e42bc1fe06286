"""
Redis Lua script adapter with EVALSHA and pipelined NOSCRIPT fallback
Runs scripts by name against an explicit Redis client
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

import redis
from redis.exceptions import NoScriptError, RedisError, ResponseError

from core.config import Settings, get_settings
from core.exceptions import ScriptLoadError, ShaMismatchError
from core.logging import get_logger
from redis_scripts.registry import Script, ScriptRegistry, get_default_search_path

NOSCRIPT_MARKER = "NOSCRIPT"

logger = get_logger(__name__, domain="adapter")


def is_noscript_error(error: BaseException) -> bool:
    """True if ``error`` is Redis saying the script is not in its script cache."""
    return isinstance(error, NoScriptError) or (
        isinstance(error, ResponseError) and NOSCRIPT_MARKER in str(error)
    )


def _as_str(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("ascii")
    return value


@dataclass
class LoadAllResult:
    """Outcome of loading every script: SHAs that loaded, errors for those that did not."""

    loaded: Dict[str, str] = field(default_factory=dict)
    failed: Dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_errors(self) -> None:
        if self.failed:
            raise ScriptLoadError(self.failed)


class RedisScripts:
    """
    Adapter for running named Lua scripts on a Redis client.

    Scripts live in .lua files under ``search_path`` (see ScriptRegistry). The
    ``*args`` taken by run, eval and evalsha are passed through to redis-py
    unchanged, so they follow its ``numkeys, *keys_and_args`` convention:

        scripts = RedisScripts(redis.Redis(), search_path=["lua"])
        scripts.run("counters/incr", 1, "hits", 5)
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        search_path: Optional[Iterable[Any]] = None,
        registry: Optional[ScriptRegistry] = None,
    ):
        """
        Args:
            redis_client: Redis connection used for every command
            search_path: Script directories; defaults to the process-wide default
            registry: Existing registry to share between adapters
        """
        if registry is None:
            registry = ScriptRegistry(search_path)
        elif search_path is not None:
            registry.search_path = search_path

        self._redis = redis_client
        self.registry = registry

    @property
    def redis(self) -> redis.Redis:
        """The adapter's Redis client."""
        return self._redis

    @property
    def search_path(self):
        return self.registry.search_path

    @search_path.setter
    def search_path(self, paths: Iterable[Any]) -> None:
        self.registry.search_path = paths

    def script(self, name: Any) -> Script:
        """
        Return the named script.

        Raises ScriptNotFoundError if no such script exists.
        """
        return self.registry.resolve(name)

    def scripts(self) -> Dict[str, Script]:
        return self.registry.scripts()

    def run(self, name: Any, *args: Any) -> Any:
        """
        Run the named script with the given ``args``.

        Tries EVALSHA first. If Redis does not have the script cached, the
        script is loaded and run again by SHA in a single pipelined round
        trip, so a SCRIPT FLUSH from another client cannot land between the
        two. Because of that pipeline, do not call this on a client that is
        inside a MULTI transaction.

        Raises:
            ScriptNotFoundError: If no such script exists
            ShaMismatchError: If Redis reports a different SHA for the loaded script
            RedisError: Any other error from Redis, unchanged
        """
        script = self.script(name)
        try:
            return self._redis.evalsha(script.sha, *args)
        except ResponseError as error:
            if not is_noscript_error(error):
                raise

        logger.debug(f"NOSCRIPT for {script.name}, loading and retrying", extra={"script": script.name})
        return self._load_and_run(script, args)

    def eval(self, name: Any, *args: Any) -> Any:
        """
        Call EVAL for the named script.

        Raises ScriptNotFoundError if no such script exists.
        """
        return self._redis.eval(self.script(name).content, *args)

    def load(self, name: Any) -> str:
        """
        Call SCRIPT LOAD for the named script and return the SHA Redis reports.

        Raises ScriptNotFoundError if no such script exists.
        """
        return _as_str(self._redis.script_load(self.script(name).content))

    def load_all(self) -> LoadAllResult:
        """
        Call SCRIPT LOAD for every script.

        This primes the script cache. It does not remove any scripts; use
        ``redis.script_flush()`` first if that is required. Loading is best
        effort: a script that fails is recorded in the result and the rest
        are still loaded.
        """
        result = LoadAllResult()
        for name, script in sorted(self.registry.scripts().items()):
            try:
                result.loaded[name] = _as_str(self._redis.script_load(script.content))
            except (RedisError, OSError) as e:
                logger.error(f"Failed to load script {name}: {e}", extra={"script": name})
                result.failed[name] = e

        logger.info(
            f"Loaded {len(result.loaded)} Lua scripts",
            extra={"loaded": len(result.loaded), "failed": len(result.failed)},
        )
        return result

    def exists(self, name: Any) -> bool:
        """
        Call SCRIPT EXISTS for the named script.

        Raises ScriptNotFoundError if no such script exists.
        """
        return bool(self._redis.script_exists(self.script(name).sha)[0])

    def evalsha(self, name: Any, *args: Any) -> Any:
        """
        Call EVALSHA for the named script.

        Raises ScriptNotFoundError if no such script exists. Errors from Redis,
        including NoScriptError, are not handled.
        """
        return self._redis.evalsha(self.script(name).sha, *args)

    def _load_and_run(self, script: Script, args: tuple) -> Any:
        with self._redis.pipeline(transaction=False) as pipe:
            pipe.script_load(script.content)
            pipe.evalsha(script.sha, *args)
            sha, value = pipe.execute()

        sha = _as_str(sha)
        if sha != script.sha:
            logger.critical(
                f"SHA mismatch for {script.name}: expected {script.sha}, got {sha}",
                extra={"script": script.name},
            )
            raise ShaMismatchError(script.name, script.sha, sha)
        return value

    def __repr__(self) -> str:
        return f"RedisScripts(redis={self._redis!r}, search_path={self.search_path!r})"


# Global adapter instance
_scripts: Optional[RedisScripts] = None


def create_scripts(settings: Optional[Settings] = None, search_path: Optional[Iterable[Any]] = None) -> RedisScripts:
    """
    Build an adapter from settings.

    The search path is, in order of preference: ``search_path``, the
    process-wide default, then ``settings.script_path``.
    """
    settings = settings or get_settings()
    client = redis.from_url(
        settings.redis_url,
        decode_responses=settings.redis_decode_responses,
        socket_timeout=settings.redis_socket_timeout,
    )
    if search_path is None:
        search_path = get_default_search_path()
    if search_path is None:
        search_path = settings.search_path
    return RedisScripts(client, search_path=search_path)


def get_scripts() -> RedisScripts:
    """Get global adapter instance."""
    global _scripts
    if _scripts is None:
        _scripts = create_scripts()
    return _scripts


def run_script(name: Any, *args: Any) -> Any:
    """Run a script using the global adapter."""
    return get_scripts().run(name, *args)


def reset_scripts() -> None:
    """Reset global adapter (mainly for testing)."""
    global _scripts
    _scripts = None
