#!/usr/bin/python3
# coding=utf-8

from pathlib import Path
import json
import logging
from AppleDeliver import Deliverer


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    # 格式同 Deliverer 的 hash，例如：
    # {"app_identifier": "com.hello.world", "version": "1.0", "changelog": {"zh-Hans": "修复问题"}}
    deploy_path = Path('~/Desktop/AppleDeliver/deploy.json').expanduser()
    deploy_info = json.loads(deploy_path.read_text())
    # 截图目录，格式：
    # screenshots/zh-Hans/APP_IPHONE_67/1.png
    # screenshots/zh-Hans/APP_IPAD_PRO_129/1.png
    deploy_info.setdefault('screenshots_path', str(deploy_path.with_name('screenshots')))
    deploy_info['success'] = lambda: print('发布完成')
    Deliverer(hash=deploy_info)
