#!/usr/bin/env python3
"""
批量生成示例 - 从文件读取用户 ID / 主页链接，逐个生成订阅源 JSON

用法:
    python examples/batch_feeds.py users.txt --output feeds/
    XIAOHONGSHU_COOKIE=... python examples/batch_feeds.py users.txt --mode fulltext
"""
import argparse
import asyncio
import json
import os
import sys

from xhsfeed import FeedError, NotesFeed
from xhsfeed.profile import parse_user_id


async def run(users, mode, output):
    done = 0
    # One client and one cache for the whole batch
    async with NotesFeed() as notes_feed:
        for i, user in enumerate(users, 1):
            print(f"[{i}/{len(users)}] {user[:60]}...", file=sys.stderr)
            try:
                feed = await notes_feed.build(user, mode)
            except (FeedError, ValueError) as e:
                print(f"  ❌ {e}", file=sys.stderr)
                continue
            done += 1
            payload = json.dumps(feed.to_dict(), ensure_ascii=False, indent=2)
            if output:
                fname = os.path.join(output, f"{parse_user_id(user)}.json")
                with open(fname, "w", encoding="utf-8") as f:
                    f.write(payload)
            else:
                print(payload)
    return done


def main():
    parser = argparse.ArgumentParser(description="批量生成小红书笔记订阅源")
    parser.add_argument("file", help="用户文件（每行一个 ID 或主页链接）")
    parser.add_argument("--mode", "-m", choices=["fulltext", "images"], default="")
    parser.add_argument("--output", "-o", help="结果输出目录")
    args = parser.parse_args()

    with open(args.file, encoding="utf-8") as f:
        users = [line.strip() for line in f if line.strip() and not line.startswith("#")]

    if args.output:
        os.makedirs(args.output, exist_ok=True)

    print(f"📋 共 {len(users)} 个用户\n", file=sys.stderr)
    done = asyncio.run(run(users, args.mode, args.output))
    print(f"\n✅ 完成: {done}/{len(users)} 成功", file=sys.stderr)


if __name__ == "__main__":
    main()
