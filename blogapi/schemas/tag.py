from pydantic import BaseModel, Field

class TagResponse(BaseModel):
    """标签响应模型"""
    id: str = Field(..., description="标签ID")
    name: str = Field(..., description="标签名称")

    class Config:
        from_attributes = True
