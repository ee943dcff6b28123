from app.schemas.common import CamelModel


# 공백만 있는 댓글은 라우터에서 400 처리
class CommentRequest(CamelModel):
    content: str | None = None
