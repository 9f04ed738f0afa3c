
from .config_manager import ConfigManager, get_config_manager
from .errors import (
    CameraError,
    CaptureAlreadyRunningError,
    CaptureClosedError,
    CaptureStartError,
    CaptureStreamError,
    CodecMismatchError,
    FrameBufferOverflowError,
    PipeUnavailableError,
    ProcessOutputError,
    SignatureResolutionError,
)
from .logging_config import configure_logging
from .logging_utils import get_module_logger
from .platform_info import PlatformInfo, get_platform_info
from .process_runner import ProcessRunner, Runner, run_process

__all__ = [
    'ConfigManager',
    'get_config_manager',
    'CameraError',
    'CaptureAlreadyRunningError',
    'CaptureClosedError',
    'CaptureStartError',
    'CaptureStreamError',
    'CodecMismatchError',
    'FrameBufferOverflowError',
    'PipeUnavailableError',
    'ProcessOutputError',
    'SignatureResolutionError',
    'configure_logging',
    'get_module_logger',
    'PlatformInfo',
    'get_platform_info',
    'ProcessRunner',
    'Runner',
    'run_process',
]
