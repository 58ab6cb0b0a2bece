import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Library settings, read from the environment (or a .env file)"""
    
    REDIS_URL = os.getenv('REDISBOARD_REDIS_URL', 'redis://localhost:6379/0')
    KEY_PREFIX = os.getenv('REDISBOARD_KEY_PREFIX', 'leaderboard')
    DEFAULT_OFFSET = os.getenv('REDISBOARD_DEFAULT_OFFSET', '10')
    
    @classmethod
    def default_offset(cls):
        try:
            offset = int(cls.DEFAULT_OFFSET)
        except (TypeError, ValueError):
            raise ValueError("REDISBOARD_DEFAULT_OFFSET must be an integer")
        if offset < 0:
            raise ValueError("REDISBOARD_DEFAULT_OFFSET cannot be negative")
        return offset
    
    @classmethod
    def validate(cls):
        """Validate that the configuration is usable"""
        if not cls.REDIS_URL:
            raise ValueError("REDISBOARD_REDIS_URL is required")
        if not cls.KEY_PREFIX:
            raise ValueError("REDISBOARD_KEY_PREFIX cannot be empty")
        cls.default_offset()
