from fastapi import APIRouter, Depends
from blogapi.api.deps import get_tag_store, success
from blogapi.schemas.tag import TagResponse
from blogapi.services.tags import TagStore

router = APIRouter()

@router.get("", summary="List all tags")
def list_tags(tag_store: TagStore = Depends(get_tag_store)):
    """List all tags in alphabetical order"""
    tags = tag_store.list_all()
    return success({"tags": [TagResponse.model_validate(tag) for tag in tags]})
