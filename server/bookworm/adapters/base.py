"""ImageStore 抽象基类 - 定义外部图床适配器接口"""

from abc import ABC, abstractmethod


class ImageStoreError(Exception):
    """图床调用失败（网络错误、鉴权失败、接口返回错误等）"""


class ImageStore(ABC):
    """
    外部图床适配器抽象基类。
    每个图床服务（Cloudinary 等）需实现此接口；
    删除书评时通过 owns() 按 URL 判断图片是否由该图床托管。
    """

    name: str = ""

    @abstractmethod
    def owns(self, url: str) -> bool:
        """判断该 URL 是否指向本图床托管的图片"""
        ...

    @abstractmethod
    async def upload(self, image: str) -> str:
        """
        上传图片，返回可公开访问的 URL。
        image 可以是 data URI（base64）或远程图片 URL。
        """
        ...

    @abstractmethod
    async def delete(self, url: str) -> None:
        """按 URL 删除已托管的图片，失败抛 ImageStoreError"""
        ...
