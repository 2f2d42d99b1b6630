"""
CLI 模块

命令行接口实现。
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

import click
from loguru import logger

from modportal.download import DownloadStats
from modportal.exceptions import ModPortalError
from modportal.logger import setup_logger
from modportal.models import ModPortalConfig, load_config
from modportal.orchestrator import ModPortalManager


def parse_mod_spec(spec: str) -> Dict[str, Any]:
    """解析 NAME 或 NAME@VERSION"""
    name, _, version = spec.partition("@")
    if not name:
        raise click.BadParameter(f"无效的模组: {spec}")
    return {"name": name, "version": version or None}


def run_manager(
    ctx: click.Context,
    func: Callable[[ModPortalManager], Awaitable[Any]],
) -> Any:
    """创建管理器并运行协程，统一处理错误"""
    config: ModPortalConfig = ctx.obj["config"]

    async def _run():
        async with ModPortalManager(config) as manager:
            return await func(manager)

    try:
        return asyncio.run(_run())
    except ModPortalError as e:
        logger.error(f"运行失败: {e}")
        raise click.ClickException(str(e))


def log_download_stats(stats: DownloadStats) -> None:
    logger.info(
        f"[统计] 下载 {stats.completed}/{stats.total}，失败 {stats.failed}，"
        f"共 {stats.bytes_downloaded / 1024:.1f} KB"
    )


@click.group()
@click.option(
    "-c", "--config", "config_path", type=click.Path(exists=True), help="配置文件路径"
)
@click.option("--mod-path", help="模组目录")
@click.option("--save-path", help="存档目录")
@click.option("--game-version", help="游戏版本，0.0.0 表示任意版本")
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.version_option(version="0.1.0")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Optional[str],
    mod_path: Optional[str],
    save_path: Optional[str],
    game_version: Optional[str],
    debug: bool,
):
    """ModPortal - Factorio 模组管理工具"""
    setup_logger(debug=True if debug else None)

    try:
        config = load_config(config_path) if config_path else ModPortalConfig()
        if mod_path:
            config.mod_path = mod_path
        if save_path:
            config.save_path = save_path
        if game_version:
            config = ModPortalConfig.from_dict({**vars(config), "game_version": game_version})
    except ModPortalError as e:
        raise click.ClickException(f"配置错误: {e}")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@main.command("list")
@click.pass_context
def list_mods(ctx: click.Context):
    """列出模组目录中的模组"""

    async def _list(manager: ModPortalManager):
        return await manager.load_installed_mods(with_info=False)

    for package in run_manager(ctx, _list):
        status = "✓" if package.enabled else "✗"
        click.echo(f"  [{status}] {package.name} {package.version}")


@main.command()
@click.pass_context
def check(ctx: click.Context):
    """检查已安装模组的更新"""

    async def _check(manager: ModPortalManager):
        installed = await manager.get_installed_mods()
        return await manager.check_updates(
            {"name": p.name, "version": str(p.version)} for p in installed
        )

    for result in run_manager(ctx, _check):
        if result.has_update:
            click.echo(f"  {result.name}: {result.version}")


@main.command()
@click.pass_context
def update(ctx: click.Context):
    """更新所有已安装模组"""

    async def _update(manager: ModPortalManager):
        await manager.authenticate()
        installed = await manager.get_installed_mods()
        results = await manager.update_mods(
            {"name": p.name, "version": str(p.version)} for p in installed
        )
        return results, manager.downloader.get_stats()

    results, stats = run_manager(ctx, _update)
    updated = [r for r in results if r.has_update]
    logger.success(f"完成! 更新了 {len(updated)} 个模组")
    log_download_stats(stats)


@main.command()
@click.argument("mods", nargs=-1, required=True)
@click.option("--with-deps", is_flag=True, help="同时下载依赖")
@click.pass_context
def install(ctx: click.Context, mods: tuple, with_deps: bool):
    """安装模组（NAME 或 NAME@VERSION）"""
    specs = [parse_mod_spec(m) for m in mods]

    async def _install(manager: ModPortalManager):
        await manager.authenticate()
        await manager.download_mods(specs)
        if with_deps:
            await asyncio.gather(
                *(
                    manager.download_dependencies(spec["name"], spec["version"])
                    for spec in specs
                )
            )
        return manager.downloader.get_stats()

    stats = run_manager(ctx, _install)
    logger.success(f"完成! 安装了 {len(specs)} 个模组")
    log_download_stats(stats)


@main.command()
@click.argument("mods", nargs=-1, required=True)
@click.pass_context
def remove(ctx: click.Context, mods: tuple):
    """删除模组（NAME 或 NAME@VERSION，可使用 glob 模式）"""
    specs = [parse_mod_spec(m) for m in mods]

    async def _remove(manager: ModPortalManager):
        return await manager.remove_mods(specs)

    removed: List[str] = run_manager(ctx, _remove)
    logger.success(f"完成! 删除了 {len(removed)} 个文件")


@main.command()
@click.argument("name")
@click.option("--version", "version", help="发布版本（默认最新）")
@click.option("--optional", is_flag=True, help="包含可选依赖")
@click.pass_context
def deps(ctx: click.Context, name: str, version: Optional[str], optional: bool):
    """显示模组的依赖"""

    async def _deps(manager: ModPortalManager):
        return await manager.get_dependencies(name, version, optional)

    for dependency in run_manager(ctx, _deps):
        click.echo(f"  {dependency['name']}")


@main.command("save-mods")
@click.argument("save")
@click.pass_context
def save_mods(ctx: click.Context, save: str):
    """显示存档使用的模组（存档名不含 .zip）"""

    async def _save_mods(manager: ModPortalManager):
        return await manager.get_mods_from_save(save)

    for entry in run_manager(ctx, _save_mods):
        click.echo(f"  {entry.name} {entry.version}")


@main.command()
@click.argument("query")
@click.option("--page-size", default=10, show_default=True, help="结果数量")
@click.pass_context
def search(ctx: click.Context, query: str, page_size: int):
    """在模组门户中搜索模组"""

    async def _search(manager: ModPortalManager):
        return await manager.search_mods(query, page_size=page_size)

    for package in run_manager(ctx, _search):
        click.echo(f"  {package.name} - {package.title}")


if __name__ == "__main__":
    main()
