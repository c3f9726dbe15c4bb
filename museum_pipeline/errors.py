"""Fatal error types. Raised at startup or on a failed frame read; the
entrypoint reports them and exits non-zero."""


class FatalError(RuntimeError):
    pass


class CaptureError(FatalError):
    pass


class CalibrationError(FatalError):
    pass


class GalleryError(FatalError):
    pass


class ConfigError(FatalError):
    pass
