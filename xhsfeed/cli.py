import argparse
import asyncio
import json
import logging
import sys

from . import __version__
from .errors import FeedError
from .feed import build_feed
from .models import Feed

logger = logging.getLogger("xhsfeed")


def format_brief(feed: Feed) -> str:
    lines = [f"{'═'*60}", f"  {feed.title}", f"  {feed.link}", f"{'─'*60}"]
    for i, item in enumerate(feed.items, 1):
        date = item.pub_date.strftime("%Y-%m-%d") if item.pub_date else "----------"
        lines.append(f"  {i:>3}. {date}  @{item.author}  {item.title[:40]}")
        lines.append(f"       {item.link}")
    lines.append(f"{'═'*60}")
    lines.append(f"共 {len(feed.items)} 条")
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="xhsfeed",
        description=f"xhsfeed v{__version__} - 小红书用户笔记订阅源",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
全文模式需要设置 XIAOHONGSHU_COOKIE 环境变量（或 ~/.xhsfeed/cookies.json），
未设置时自动退回基础模式。

示例:
  xhsfeed 52d8c541b4c4d60e6c867480
  xhsfeed https://www.xiaohongshu.com/user/profile/52d8c541b4c4d60e6c867480 --mode fulltext --json
""",
    )
    parser.add_argument("user", help="用户 ID（24 位）或主页链接")
    parser.add_argument("--mode", "-m", choices=["fulltext", "images"], default="",
                        help="fulltext=图片+全文, images=仅图片 (需要 cookie)")
    parser.add_argument("--json", "-j", action="store_true", help="JSON 格式输出")
    parser.add_argument("--verbose", "-v", action="store_true", help="详细日志")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    try:
        feed = asyncio.run(build_feed(args.user, args.mode))
    except (FeedError, ValueError) as e:
        print(f"❌ 错误: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    if args.json:
        print(json.dumps(feed.to_dict(), ensure_ascii=False, indent=2))
    else:
        print(format_brief(feed))
