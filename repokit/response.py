from typing import Any, Optional
from pydantic import BaseModel

class ResponseModel(BaseModel):
    code: int = 200
    message: str = "success"
    data: Optional[Any] = None

    @staticmethod
    def success(data: Any = None):
        return {"code": 200, "message": "success", "data": data}

    @staticmethod
    def fail(code: int = 400, message: str = "error", data: Any = None):
        return {"code": code, "message": message, "data": data}

    @staticmethod
    def page(page, serializer=None):
        """Envelope for a repository Page; serializer maps each item to plain data."""
        items = [serializer(item) for item in page.items] if serializer else list(page.items)
        return ResponseModel.success(data={
            "items": items,
            "total": page.total,
            "per_page": page.per_page,
            "current_page": page.current_page,
            "last_page": page.last_page,
            "next_page_url": page.next_page_url,
            "prev_page_url": page.previous_page_url,
        })
