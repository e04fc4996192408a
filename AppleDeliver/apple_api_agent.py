#!/usr/bin/python3
# coding=utf-8
# App Store Connect API 请求封装

import hashlib
import logging
import time
from pathlib import Path
from typing import List

import jwt
import requests

from .models import *

log = logging.getLogger(__name__)

BASE_URL = 'https://api.appstoreconnect.apple.com/v1'


class AppleAPIError(Exception):
    """所有AppleDeliver错误的基类"""

    def __init__(self, message:str, errors:list = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def die(message:str):
    """参数或流程校验失败"""
    raise AppleAPIError(message)


class TokenManager(object):
    """生成App Store Connect API需要的JWT，过期后重新生成"""

    # 苹果允许的最长有效期是20分钟
    EXPIRATION = 20 * 60
    AUDIENCE = 'appstoreconnect-v1'

    def __init__(self, issuer_id:str, key_id:str, key:str) -> None:
        self.issuer_id = issuer_id
        self.key_id = key_id
        self.key = key
        self._token = None
        self._expire_at = 0

    @property
    def token(self) -> str:
        now = int(time.time())
        # 提前一分钟刷新，避免请求途中过期
        if self._token is None or now >= self._expire_at - 60:
            self._expire_at = now + self.EXPIRATION
            payload = {
                'iss': self.issuer_id,
                'iat': now,
                'exp': self._expire_at,
                'aud': self.AUDIENCE,
            }
            self._token = jwt.encode(payload, self.key, algorithm='ES256', headers={'kid': self.key_id})
        return self._token


class APIAgent(object):

    def __init__(self, token_manager:TokenManager, session:requests.Session = None, timeout:int = 60) -> None:
        self.token_manager = token_manager
        self.session = session or requests.Session()
        self.timeout = timeout

    def _api_call(self, method:str, path:str, params:dict = None, payload:dict = None) -> dict:
        url = path if path.startswith('http') else BASE_URL + path
        headers = {'Authorization': f'Bearer {self.token_manager.token}'}
        log.debug('%s %s', method, url)
        try:
            resp = self.session.request(method, url, params=params, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise AppleAPIError(f'{method} {url} 请求失败: {e}') from e
        if resp.status_code >= 400:
            try:
                errors = resp.json().get('errors', [])
            except ValueError:
                errors = []
            details = '; '.join(e.get('detail') or e.get('title', '') for e in errors) or resp.text
            raise AppleAPIError(f'{method} {url} 请求失败({resp.status_code}): {details}', errors)
        if resp.status_code == 204 or not resp.content:
            return {}
        return resp.json()

    def _list(self, path:str, model, filters:dict = None) -> list:
        """获取列表，自动翻页"""
        params = {'limit': 200}
        for key, value in (filters or {}).items():
            if isinstance(value, (list, tuple)):
                value = ','.join(value)
            params[f'filter[{key}]'] = value
        result = []
        while path:
            data = self._api_call('GET', path, params=params)
            result.extend(model(item) for item in data.get('data', []))
            # next链接里已经带了所有查询参数
            path = data.get('links', {}).get('next')
            params = None
        return result

    def _create(self, type:str, model, attributes:dict = None, relationships:dict = None):
        data = {'type': type}
        if attributes:
            data['attributes'] = attributes
        if relationships:
            data['relationships'] = {
                name: {'data': {'type': rel_type, 'id': rel_id}}
                for name, (rel_type, rel_id) in relationships.items()
            }
        result = self._api_call('POST', f'/{type}', payload={'data': data})
        return model(result.get('data'))

    def _modify(self, type:str, id:str, model, attributes:dict):
        payload = {'data': {'type': type, 'id': id, 'attributes': attributes}}
        result = self._api_call('PATCH', f'/{type}/{id}', payload=payload)
        return model(result.get('data'))

    # App

    def list_apps(self, filters:dict = None) -> List[AppStoreApp]:
        return self._list('/apps', AppStoreApp, filters=filters)

    # App Store 版本

    def list_appstore_version(self, app_id:str, filters:dict = None) -> List[AppStoreVersion]:
        return self._list(f'/apps/{app_id}/appStoreVersions', AppStoreVersion, filters=filters)

    def create_appstore_version(self, app_id:str, version_string:str, platform:Platform = Platform.IOS) -> AppStoreVersion:
        return self._create(
            'appStoreVersions',
            AppStoreVersion,
            attributes={'versionString': version_string, 'platform': platform.value},
            relationships={'app': ('apps', app_id)},
        )

    def list_localization(self, version_id:str) -> List[AppStoreVersionLocalization]:
        return self._list(f'/appStoreVersions/{version_id}/appStoreVersionLocalizations', AppStoreVersionLocalization)

    def create_localization(self, version_id:str, locale:str) -> AppStoreVersionLocalization:
        return self._create(
            'appStoreVersionLocalizations',
            AppStoreVersionLocalization,
            attributes={'locale': locale},
            relationships={'appStoreVersion': ('appStoreVersions', version_id)},
        )

    def modify_localization(self, localization_id:str, attributes:dict) -> AppStoreVersionLocalization:
        return self._modify('appStoreVersionLocalizations', localization_id, AppStoreVersionLocalization, attributes)

    # App信息(名称、隐私政策)

    def list_app_infos(self, app_id:str) -> List[AppInfo]:
        return self._list(f'/apps/{app_id}/appInfos', AppInfo)

    def list_app_info_localization(self, info_id:str) -> List[AppInfoLocalization]:
        return self._list(f'/appInfos/{info_id}/appInfoLocalizations', AppInfoLocalization)

    def create_app_info_localization(self, info_id:str, locale:str, attributes:dict) -> AppInfoLocalization:
        return self._create(
            'appInfoLocalizations',
            AppInfoLocalization,
            attributes=dict(attributes, locale=locale),
            relationships={'appInfo': ('appInfos', info_id)},
        )

    def modify_app_info_localization(self, localization_id:str, attributes:dict) -> AppInfoLocalization:
        return self._modify('appInfoLocalizations', localization_id, AppInfoLocalization, attributes)

    # 截图

    def list_app_screenshot_set(self, localization_id:str, filters:dict = None) -> List[AppScreenshotSet]:
        return self._list(f'/appStoreVersionLocalizations/{localization_id}/appScreenshotSets', AppScreenshotSet, filters=filters)

    def create_app_screenshot_set(self, localization_id:str, display_type:ScreenshotDisplayType) -> str:
        screenshot_set = self._create(
            'appScreenshotSets',
            AppScreenshotSet,
            attributes={'screenshotDisplayType': display_type.value},
            relationships={'appStoreVersionLocalization': ('appStoreVersionLocalizations', localization_id)},
        )
        return screenshot_set.id

    def list_app_screenshot(self, set_id:str) -> List[AppScreenshot]:
        return self._list(f'/appScreenshotSets/{set_id}/appScreenshots', AppScreenshot)

    def delete_app_screenshot(self, screenshot_id:str):
        self._api_call('DELETE', f'/appScreenshots/{screenshot_id}')

    def create_app_screenshot(self, set_id:str, file:Path) -> AppScreenshot:
        """预留截图，返回的截图里带有分片上传操作"""
        return self._create(
            'appScreenshots',
            AppScreenshot,
            attributes={'fileName': file.name, 'fileSize': file.stat().st_size},
            relationships={'appScreenshotSet': ('appScreenshotSets', set_id)},
        )

    def upload_app_screenshot(self, screenshot:AppScreenshot, file:Path):
        content = file.read_bytes()
        for op in screenshot.upload_operations:
            chunk = content[op.offset:op.offset + op.length]
            # 上传地址不是API地址，不需要token
            try:
                resp = self.session.request(op.method, op.url, headers=op.request_headers, data=chunk, timeout=self.timeout)
            except requests.RequestException as e:
                raise AppleAPIError(f'{file} 分片上传失败: {e}') from e
            if resp.status_code >= 400:
                raise AppleAPIError(f'{file} 分片上传失败({resp.status_code})')

    def verify_app_screenshot(self, screenshot_id:str, file:Path) -> AppScreenshotState:
        """通知苹果截图已上传完成，返回截图状态"""
        checksum = hashlib.md5(file.read_bytes()).hexdigest()
        screenshot = self._modify(
            'appScreenshots',
            screenshot_id,
            AppScreenshot,
            {'uploaded': True, 'sourceFileChecksum': checksum},
        )
        return screenshot.state
