#!/usr/bin/python3
# coding=utf-8
# 命令行入口：apple-deliver [Deliverfile路径]

import argparse
import logging

from . import __version__
from .apple_api_agent import AppleAPIError
from .deliverer import Deliverer

log = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='apple-deliver', description='执行Deliverfile，上传App元数据、截图和ipa')
    parser.add_argument('path', nargs='?', default=None, help='Deliverfile路径，或者其所在目录，默认当前目录')
    parser.add_argument('-v', '--verbose', action='store_true', help='输出请求等调试信息')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    try:
        Deliverer(path=args.path)
    except AppleAPIError as e:
        log.error('%s', e)
        return 1
    return 0
