from .file_storage import UPLOAD_ERR_CANT_WRITE as UPLOAD_ERR_CANT_WRITE
from .file_storage import UPLOAD_ERR_EXTENSION as UPLOAD_ERR_EXTENSION
from .file_storage import UPLOAD_ERR_FORM_SIZE as UPLOAD_ERR_FORM_SIZE
from .file_storage import UPLOAD_ERR_INI_SIZE as UPLOAD_ERR_INI_SIZE
from .file_storage import UPLOAD_ERR_NO_FILE as UPLOAD_ERR_NO_FILE
from .file_storage import UPLOAD_ERR_NO_TMP_DIR as UPLOAD_ERR_NO_TMP_DIR
from .file_storage import UPLOAD_ERR_OK as UPLOAD_ERR_OK
from .file_storage import UPLOAD_ERR_PARTIAL as UPLOAD_ERR_PARTIAL
from .file_storage import UploadedFile as UploadedFile
from .headers import HeaderBag as HeaderBag
from .structures import ImmutableDict as ImmutableDict
from .structures import iter_items as iter_items
