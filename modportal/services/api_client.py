"""
API 客户端

模组门户（元数据源）、认证接口与联机大厅接口的 aiohttp 客户端。
"""

from typing import Any, Optional

import aiohttp
from loguru import logger

from modportal.exceptions import APIError, InsufficientCredentialsError, NotFoundError
from modportal.models import Credentials, Package
from modportal.models.config import AUTH_URL, MATCHMAKING_URL, PORTAL_URL


class ModPortalClient:
    """模组门户 API 客户端"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        portal_url: str = PORTAL_URL,
        auth_url: str = AUTH_URL,
        matchmaking_url: str = MATCHMAKING_URL,
    ):
        self._session = session
        self._owned_session = session is None
        self.portal_url = portal_url.rstrip("/")
        self.auth_url = auth_url
        self.matchmaking_url = matchmaking_url.rstrip("/")

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def _request(
        self,
        method: str,
        url: str,
        params: Optional[dict] = None,
    ) -> Optional[Any]:
        """发送 API 请求，404 返回 None"""
        try:
            async with self.session.request(method, url, params=params) as response:
                if response.status == 200:
                    return await response.json(content_type=None)
                elif response.status == 404:
                    return None
                else:
                    raise APIError(
                        f"API 请求失败 (状态码: {response.status})",
                        response=response,
                    )
        except aiohttp.ClientError as e:
            raise APIError(f"API 请求失败: {e}", context={"url": url}) from e

    async def get_package(self, name: str) -> Package:
        """获取模组完整信息"""
        response = await self._request("GET", f"{self.portal_url}/api/mods/{name}/full")
        if response is None or "name" not in response:
            raise NotFoundError(f"模组不存在: {name}", context={"name": name})
        logger.debug(f"[门户] 已获取模组 '{name}' 的 {len(response.get('releases', []))} 个版本")
        return Package.from_portal(response)

    async def search_packages(self, query: str = "", **params) -> list[Package]:
        """
        搜索模组

        Args:
            query: 搜索关键字
            params: 其他查询参数，例如 page_size、sort
        """
        if query:
            params["q"] = query
        response = await self._request(
            "GET", f"{self.portal_url}/api/mods", params=params or None
        )
        if response is None:
            return []
        return [Package.from_portal(item) for item in response.get("results", [])]

    async def authenticate(
        self,
        username: Optional[str],
        password: Optional[str] = None,
        token: Optional[str] = None,
        require_ownership: bool = False,
    ) -> Credentials:
        """
        认证

        提供 token 时直接使用；否则使用密码向认证接口换取 token。
        """
        if username and token:
            return Credentials(username=username, token=token)

        if not (username and password):
            raise InsufficientCredentialsError(
                "认证信息不足: 需要 username 以及 token 或 password"
            )

        params = {
            "username": username,
            "password": password,
            "require_ownership": str(require_ownership).lower(),
        }
        try:
            async with self.session.post(self.auth_url, data=params) as response:
                if response.status != 200:
                    raise APIError(
                        f"认证失败 (状态码: {response.status})", response=response
                    )
                body = await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise APIError(f"认证请求失败: {e}", context={"url": self.auth_url}) from e

        if isinstance(body, list) and body:
            return Credentials(username=username, token=body[0])
        if isinstance(body, dict) and body.get("token"):
            return Credentials(
                username=body.get("username", username), token=body["token"]
            )
        raise APIError("认证接口返回了无法识别的数据", context={"body": body})

    async def get_games(self, credentials: Credentials) -> Any:
        """获取联机大厅中的所有游戏"""
        return await self._request(
            "GET",
            f"{self.matchmaking_url}/get-games",
            params=credentials.as_params(),
        )

    async def get_game_details(self, game_id: int) -> Any:
        """获取联机游戏详情"""
        response = await self._request(
            "GET", f"{self.matchmaking_url}/get-game-details/{game_id}"
        )
        if response is None:
            raise NotFoundError(f"游戏不存在: {game_id}", context={"game_id": game_id})
        return response

    async def close(self):
        """关闭客户端"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        """异步上下文管理器入口"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
