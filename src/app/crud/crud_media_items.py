from fastcrud import FastCRUD

from ..models.media_item import MediaItem
from ..schemas.media_item import MediaItemCreateInternal, MediaItemRead, MediaItemUpdate

CRUDMediaItem = FastCRUD[MediaItem, MediaItemCreateInternal, MediaItemUpdate, MediaItemUpdate, MediaItemUpdate, MediaItemRead]
crud_media_items = CRUDMediaItem(MediaItem)
