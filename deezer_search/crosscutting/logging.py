import json
import logging
import re
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from contextvars import ContextVar

# Context variables for correlation
query_var: ContextVar[Optional[str]] = ContextVar('query', default=None)
kind_var: ContextVar[Optional[str]] = ContextVar('kind', default=None)
catalog_id_var: ContextVar[Optional[str]] = ContextVar('catalog_id', default=None)
stage_var: ContextVar[Optional[str]] = ContextVar('stage', default=None)


class SecretMasker:
    """Masks sensitive information in log messages."""

    def __init__(self):
        """Initialize secret masker with patterns."""
        self.patterns = [
            # Tokens passed as URL query parameters
            r'(?i)(access_token=)([^&\s"\']+)',
            # API tokens and keys
            r'(?i)(token|key|secret|password|auth)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{10,})["\']?',
            # Deezer access tokens
            r'(?i)(deezer_access_token|access_token)[\s]*[:=][\s]*["\']?([a-zA-Z0-9\-_\.]{20,})["\']?',
        ]

        self.compiled_patterns = [re.compile(pattern) for pattern in self.patterns]

    def mask_secrets(self, text: str) -> str:
        """Mask sensitive information in text."""
        if not text:
            return text

        masked_text = text

        for pattern in self.compiled_patterns:
            def replace_match(match):
                prefix = match.group(1)
                secret = match.group(2)
                # Keep first 4 and last 4 characters, mask the rest
                if len(secret) > 8:
                    masked_secret = secret[:4] + '*' * (len(secret) - 8) + secret[-4:]
                else:
                    masked_secret = '*' * len(secret)
                if prefix.endswith('='):
                    return f"{prefix}{masked_secret}"
                return f"{prefix}: {masked_secret}"

            masked_text = pattern.sub(replace_match, masked_text)

        return masked_text

    def mask_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mask sensitive information in dictionary."""
        if not data:
            return data

        masked_data = {}

        for key, value in data.items():
            if isinstance(value, str):
                masked_data[key] = self.mask_secrets(value)
            elif isinstance(value, dict):
                masked_data[key] = self.mask_dict(value)
            elif isinstance(value, list):
                masked_data[key] = [self.mask_dict(item) if isinstance(item, dict)
                                    else self.mask_secrets(item) if isinstance(item, str)
                                    else item for item in value]
            else:
                masked_data[key] = value

        return masked_data


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self):
        """Initialize formatter."""
        super().__init__()
        self.masker = SecretMasker()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        query = query_var.get()
        kind = kind_var.get()
        catalog_id = catalog_id_var.get()
        stage = stage_var.get()

        log_entry = {
            'ts': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': self.mask_secrets(record.getMessage()),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add correlation fields if available
        if query:
            log_entry['query'] = self.mask_secrets(query)
        if kind:
            log_entry['kind'] = kind
        if catalog_id:
            log_entry['catalogId'] = catalog_id
        if stage:
            log_entry['stage'] = stage

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        if hasattr(record, 'fields') and record.fields:
            log_entry['fields'] = self.masker.mask_dict(record.fields)

        return json.dumps(log_entry, ensure_ascii=False)

    def mask_secrets(self, text: str) -> str:
        """Mask secrets in text."""
        return self.masker.mask_secrets(text)


class CorrelationContext:
    """Context manager for correlation data."""

    def __init__(self, query: Optional[str] = None,
                 kind: Optional[str] = None,
                 catalog_id: Optional[str] = None,
                 stage: Optional[str] = None):
        """Initialize correlation context."""
        self.values = {
            query_var: query,
            kind_var: kind,
            catalog_id_var: catalog_id,
            stage_var: stage,
        }
        self._tokens = []

    def __enter__(self):
        """Set correlation context."""
        for var, value in self.values.items():
            if value is not None:
                self._tokens.append((var, var.set(value)))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Restore correlation context."""
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


def setup_logging(level: str = 'INFO',
                  log_file: Optional[str] = None) -> logging.Logger:
    """Setup structured logging for the package logger."""
    logger = logging.getLogger('deezer_search')
    logger.setLevel(getattr(logging, level.upper()))

    logger.handlers.clear()

    formatter = StructuredFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_with_fields(logger: logging.Logger, level: str, message: str,
                    fields: Optional[Dict[str, Any]] = None, **kwargs):
    """Log message with additional fields."""
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return
    record = logger.makeRecord(
        logger.name, levelno,
        '', 0, message, (), None
    )

    if fields:
        record.fields = dict(fields)
    if kwargs:
        if not hasattr(record, 'fields'):
            record.fields = {}
        record.fields.update(kwargs)

    logger.handle(record)


def log_search_start(logger: logging.Logger, kind: str, catalog_id: str, **kwargs):
    """Log the start of a catalog lookup."""
    with CorrelationContext(kind=kind, catalog_id=catalog_id, stage='fetch'):
        log_with_fields(logger, 'INFO', 'Catalog lookup started', kwargs)


def log_search_complete(logger: logging.Logger, kind: str, catalog_id: str,
                        load_type: str, track_count: int, **kwargs):
    """Log the end of a catalog lookup."""
    with CorrelationContext(kind=kind, catalog_id=catalog_id, stage='complete'):
        log_with_fields(logger, 'INFO', 'Catalog lookup completed', {
            'load_type': load_type,
            'track_count': track_count,
            **kwargs
        })


def log_error(logger: logging.Logger, message: str, error: Exception, **kwargs):
    """Log error with exception details."""
    log_with_fields(logger, 'ERROR', message, {
        'error_type': type(error).__name__,
        'error_message': str(error),
        **kwargs
    })
