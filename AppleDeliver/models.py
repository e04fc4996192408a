#!/usr/bin/python3
# coding=utf-8
# App Store Connect API 返回数据的模型

from enum import Enum
from typing import List


class Platform(Enum):
    IOS = 'IOS'
    MAC_OS = 'MAC_OS'
    TV_OS = 'TV_OS'
    VISION_OS = 'VISION_OS'


class ScreenshotDisplayType(Enum):
    """截图尺寸类型，目录名必须是其中之一"""
    APP_IPHONE_67 = 'APP_IPHONE_67'
    APP_IPHONE_65 = 'APP_IPHONE_65'
    APP_IPHONE_61 = 'APP_IPHONE_61'
    APP_IPHONE_58 = 'APP_IPHONE_58'
    APP_IPHONE_55 = 'APP_IPHONE_55'
    APP_IPHONE_47 = 'APP_IPHONE_47'
    APP_IPHONE_40 = 'APP_IPHONE_40'
    APP_IPHONE_35 = 'APP_IPHONE_35'
    APP_IPAD_PRO_3GEN_129 = 'APP_IPAD_PRO_3GEN_129'
    APP_IPAD_PRO_3GEN_11 = 'APP_IPAD_PRO_3GEN_11'
    APP_IPAD_PRO_129 = 'APP_IPAD_PRO_129'
    APP_IPAD_105 = 'APP_IPAD_105'
    APP_IPAD_97 = 'APP_IPAD_97'


class AppScreenshotState(Enum):
    AWAITING_UPLOAD = 'AWAITING_UPLOAD'
    UPLOAD_COMPLETE = 'UPLOAD_COMPLETE'
    COMPLETE = 'COMPLETE'
    FAILED = 'FAILED'


def _camel_case(name: str) -> str:
    first, *rest = name.split('_')
    return first + ''.join(word.title() for word in rest)


class Attributes(object):
    """
    资源的attributes，字段按蛇形命名访问
    例如：attributes.version_string 对应 versionString
    """

    def __init__(self, attrs:dict) -> None:
        self._attrs = attrs or {}

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        return self._attrs.get(_camel_case(name))

    def to_dict(self) -> dict:
        return dict(self._attrs)


class Resource(object):
    """JSON:API 中的单个资源"""

    def __init__(self, data:dict) -> None:
        data = data or {}
        self.id = data.get('id')
        self.type = data.get('type')
        self.attributes = Attributes(data.get('attributes'))
        self.relationships = data.get('relationships', {})

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.id})'


class AppStoreApp(Resource):

    @property
    def bundle_id(self) -> str:
        return self.attributes.bundle_id


class AppStoreVersion(Resource):

    @property
    def version_string(self) -> str:
        return self.attributes.version_string


class AppStoreVersionLocalization(Resource):

    @property
    def locale(self) -> str:
        return self.attributes.locale


class AppInfo(Resource):

    # 这些状态下的AppInfo已经上架，不能再修改
    LIVE_STATES = ('READY_FOR_SALE', 'READY_FOR_DISTRIBUTION', 'REPLACED_WITH_NEW_INFO')

    @property
    def editable(self) -> bool:
        state = self.attributes.state or self.attributes.app_store_state
        return state not in self.LIVE_STATES


class AppInfoLocalization(Resource):

    @property
    def locale(self) -> str:
        return self.attributes.locale


class AppScreenshotSet(Resource):

    @property
    def display_type(self) -> ScreenshotDisplayType:
        return ScreenshotDisplayType(self.attributes.screenshot_display_type)


class UploadOperation(object):
    """上传截图时，苹果返回的分片上传操作"""

    def __init__(self, data:dict) -> None:
        self.method = data.get('method', 'PUT')
        self.url = data.get('url')
        self.offset = data.get('offset', 0)
        self.length = data.get('length', 0)
        self.request_headers = {h['name']: h['value'] for h in data.get('requestHeaders') or []}


class AppScreenshot(Resource):

    @property
    def upload_operations(self) -> List[UploadOperation]:
        return [UploadOperation(op) for op in self.attributes.upload_operations or []]

    @property
    def state(self) -> AppScreenshotState:
        delivery = self.attributes.asset_delivery_state or {}
        state = delivery.get('state')
        return AppScreenshotState(state) if state else None
