# Core components: config, logging
from .config import quiz_settings, QuizSettings
from .logging_config import QuizJsonFormatter, quiz_log_context, setup_logging
