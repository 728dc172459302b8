"""
CLI 模块

命令行接口实现。
"""

import asyncio
import sys
from typing import List, Optional

import click
from loguru import logger

from packotter.archive import ArchiveReader
from packotter.exceptions import PackOtterError
from packotter.logger import setup_logger
from packotter.models import LayoutKind, PackOtterConfig, load_config, parse_selector
from packotter.orchestrator import PackOtterOrchestrator


USAGE = """\
Usage: packotter <input.zip> <outputDir> <loader>

Arguments:
  input.zip      Path to the modpack zip file
  outputDir      Output directory for the extracted modpack
  loader         Loader type:
                 1, multimc   - Use MultiMC loader
                 2, modrinth  - Use Modrinth loader
                 all          - Use both loaders

Examples:
  packotter ./modpack.zip ./output 1
  packotter ./modpack.zip ./output modrinth
  packotter ./modpack.zip ./output all
"""


def show_usage(error: Optional[str] = None) -> None:
    """输出用法并以状态码 1 退出"""
    if error:
        click.echo(f"Error: {error}", err=True)
    click.echo(USAGE, err=True)
    sys.exit(1)


async def run_async(
    input_path: str,
    output_dir: str,
    kinds: List[LayoutKind],
    config: PackOtterConfig,
):
    """异步运行"""
    for kind in kinds:
        logger.info(f"Starting {kind.value} extraction...")
        orchestrator = PackOtterOrchestrator(config, input_path, output_dir, kind)
        result = await orchestrator.run()
        if result.report.skipped:
            logger.warning(f"跳过了 {result.report.skipped} 个文件")


def print_info(input_path: str, strict: bool) -> None:
    """输出整合包概要（不解压、不下载）"""
    manifest = ArchiveReader(input_path, strict=strict).read_manifest()
    click.echo(f"Modpack Name: {manifest.name}")
    click.echo(f"Modpack Version: {manifest.version}")
    click.echo(f"Minecraft Version: {manifest.game_version}")
    click.echo(f"Total Mods: {len(manifest.files)}")
    click.echo(f"Modloader: {manifest.loader_id}")


@click.command()
@click.argument("input_path", required=False, metavar="INPUT.ZIP")
@click.argument("output_dir", required=False, metavar="OUTPUT_DIR")
@click.argument("loader", required=False, metavar="LOADER")
@click.option("-c", "--config", "config_path", type=click.Path(), help="配置文件 (toml/json/yaml)")
@click.option("--batch-size", type=int, help="每批并发处理的文件数")
@click.option("--strict", is_flag=True, help="严格模式（条目损坏或加载器未知时中止）")
@click.option("--hash-suffix", is_flag=True, help="实例名追加名称哈希")
@click.option("--info", is_flag=True, help="只显示整合包信息")
@click.option("--debug", is_flag=True, help="启用调试模式")
@click.option("--log-file", type=click.Path(dir_okay=False), help="同时把完整的调试日志写入文件")
@click.version_option(version="0.1.0")
def main(
    input_path: Optional[str],
    output_dir: Optional[str],
    loader: Optional[str],
    config_path: Optional[str],
    batch_size: Optional[int],
    strict: bool,
    hash_suffix: bool,
    info: bool,
    debug: bool,
    log_file: Optional[str],
):
    """PackOtter - CurseForge 整合包转换工具"""
    try:
        setup_logger(level="DEBUG" if debug else None, log_file=log_file)
    except PackOtterError as e:
        show_usage(str(e))

    if info:
        if not input_path:
            show_usage("Missing input.zip")
        try:
            print_info(input_path, strict)
        except PackOtterError as e:
            logger.error(f"读取整合包失败: {e}")
            sys.exit(1)
        return

    if not input_path or not output_dir or not loader:
        show_usage()

    try:
        kinds = parse_selector(loader)
    except PackOtterError:
        show_usage(f'Invalid loader type "{loader}"')

    try:
        config = load_config(config_path)
        if batch_size is not None:
            config.download.batch_size = batch_size
        if strict:
            config.extract.strict = True
            config.strict_loader = True
        if hash_suffix:
            config.output.hash_suffix = True
        config.validate()

        asyncio.run(run_async(input_path, output_dir, kinds, config))

    except PackOtterError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"运行时错误: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
