import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Where exports land when --output-dir is not given
    OUTPUT_DIR = os.getenv('PIPELINE_OUTPUT_DIR', 'output')
    LOG_LEVEL = os.getenv('PIPELINE_LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'

    # Pipeline filter defaults are read per run in services/pipeline_config.py
    # (PIPELINE_CHUNK_SIZE, PIPELINE_COMPLETION_OFFSET_DAYS,
    # PIPELINE_MIN_CONTRACT_AMOUNT, PIPELINE_EXCLUDED_TYPES,
    # PIPELINE_EXCLUDED_KEYWORDS)
