#!/usr/bin/python3
# coding=utf-8
# 读取ipa中的信息，并通过altool上传ipa

import logging
import os
import plistlib
import re
import subprocess
import tempfile
import zipfile
from pathlib import Path

from .apple_api_agent import AppleAPIError, die

log = logging.getLogger(__name__)

INFO_PLIST_PATTERN = re.compile(r'^Payload/[^/]+\.app/Info\.plist$')


class IpaUploadError(AppleAPIError):
    """altool上传失败"""


class IpaUploader(object):

    def __init__(self, app, ipa_path) -> None:
        """
        @param app: 上传到哪个App，上传前可以重新设置
        @param ipa_path: ipa文件路径
        """
        self.app = app
        self.ipa_path = Path(ipa_path).expanduser()
        if not self.ipa_path.is_file():
            die(f'ipa文件 {self.ipa_path} 不存在')
        self._info_plist = None

    @property
    def info_plist(self) -> dict:
        if self._info_plist is None:
            try:
                with zipfile.ZipFile(self.ipa_path) as ipa:
                    names = [name for name in ipa.namelist() if INFO_PLIST_PATTERN.match(name)]
                    if not names:
                        die(f'{self.ipa_path} 中没有找到Info.plist')
                    self._info_plist = plistlib.loads(ipa.read(names[0]))
            except zipfile.BadZipFile:
                die(f'{self.ipa_path} 不是有效的ipa文件')
        return self._info_plist

    def fetch_app_identifier(self) -> str:
        return self.info_plist.get('CFBundleIdentifier')

    def fetch_app_version(self) -> str:
        return self.info_plist.get('CFBundleShortVersionString')

    def fetch_build_number(self) -> str:
        return self.info_plist.get('CFBundleVersion')

    def upload_command(self, key_id:str, issuer_id:str) -> list:
        # altool --upload-app 已被苹果标记为废弃，新版Xcode中可改用 --upload-package，但它还需要apple id和build号
        return [
            'xcrun', 'altool',
            '--upload-app',
            '--type', 'ios',
            '--file', str(self.ipa_path),
            '--apiKey', key_id,
            '--apiIssuer', issuer_id,
        ]

    def upload(self):
        credentials = self.app.credentials
        log.info('开始上传 %s (%s build %s)', self.ipa_path.name, self.fetch_app_version(), self.fetch_build_number())
        # altool只能从目录中读取 AuthKey_<key_id>.p8，用临时目录存放私钥
        with tempfile.TemporaryDirectory() as key_dir:
            Path(key_dir).joinpath(f'AuthKey_{credentials.key_id}.p8').write_text(credentials.key)
            env = dict(os.environ, API_PRIVATE_KEYS_DIR=key_dir)
            try:
                result = subprocess.run(
                    self.upload_command(credentials.key_id, credentials.issuer_id),
                    capture_output=True,
                    text=True,
                    env=env,
                )
            except OSError as e:
                raise IpaUploadError(f'无法运行xcrun altool，请确认已安装Xcode: {e}') from e
        if result.returncode != 0:
            raise IpaUploadError(f'{self.ipa_path} 上传失败: {(result.stderr or result.stdout).strip()}')
        log.info('%s 上传成功', self.ipa_path.name)
