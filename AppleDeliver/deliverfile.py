#!/usr/bin/python3
# coding=utf-8
# Deliverfile：用Python脚本描述一次发布
#
# 脚本中每个可设置的key都是一个函数，例如：
#
#   app_identifier('com.hello.world')
#   version('1.0.1')
#   description({'en-US': 'Hello World'})
#
#   @unit_tests
#   def run_tests():
#       return subprocess.call(['make', 'test']) == 0

import logging
from pathlib import Path

from .apple_api_agent import AppleAPIError

log = logging.getLogger(__name__)

FILE_NAME = 'Deliverfile'

MISSING_APP_IDENTIFIER_MESSAGE = 'Deliverfile中没有app_identifier，也没有提供ipa，例如：app_identifier("com.hello.world")'
MISSING_VERSION_NUMBER_MESSAGE = 'Deliverfile中没有version，也没有提供ipa，例如：version("1.0.1")'
INVALID_KEY_ERROR = "Deliverfile中的 '{}' 不是可用的key"
MISSING_VALUE_ERROR = "Deliverfile中 '{}' 的值不能为空"


class DeliverfileDSLError(AppleAPIError):
    """Deliverfile内容错误"""


class Deliverfile(object):

    def __init__(self, deliverer, path=None) -> None:
        """
        执行Deliverfile，执行完后开始发布
        @param deliverer: 接收Deliverfile中所有值的Deliverer
        @param path: Deliverfile路径，或者其所在目录，默认当前目录
        """
        self.deliverer = deliverer
        self.path = self._find(path)
        self.run()
        deliverer.finished_executing_deliver_file()

    @staticmethod
    def _find(path) -> Path:
        path = Path(path or '.').expanduser()
        if path.is_dir():
            path = path.joinpath(FILE_NAME)
        if not path.is_file():
            raise DeliverfileDSLError(f'Deliverfile {path} 不存在')
        return path

    def _value_setter(self, key:str):
        def setter(value=None):
            # 传入函数时，使用函数的返回值，这样也可以当装饰器用
            if callable(value):
                value = value()
            if value is None:
                raise DeliverfileDSLError(MISSING_VALUE_ERROR.format(key))
            self.deliverer.set_new_value(key, value)
            return value
        setter.__name__ = key
        return setter

    def _block_setter(self, key:str):
        def setter(block):
            self.deliverer.set_new_block(key, block)
            return block
        setter.__name__ = key
        return setter

    def namespace(self) -> dict:
        """执行Deliverfile时可用的全局变量"""
        deliverer_class = type(self.deliverer)
        namespace = {'__file__': str(self.path), '__name__': '__deliverfile__'}
        for key in deliverer_class.all_available_keys_to_set():
            namespace[key] = self._value_setter(key)
        for key in deliverer_class.all_available_blocks_to_set():
            namespace[key] = self._block_setter(key)
        return namespace

    def run(self):
        log.debug('执行 %s', self.path)
        code = compile(self.path.read_text(encoding='utf-8'), str(self.path), 'exec')
        try:
            exec(code, self.namespace())
        except NameError as e:
            name = getattr(e, 'name', None) or str(e)
            raise DeliverfileDSLError(INVALID_KEY_ERROR.format(name)) from e
