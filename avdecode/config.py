"""Configuration module for the aviation text decoders."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""
    
    # Logging level
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    
    # Software Version
    VERSION = os.getenv('VERSION', 'v0.0.0')

    # Route region preference when none is given (auto, uk-eu, us)
    DEFAULT_REGION = os.getenv('DEFAULT_REGION', 'auto').strip().lower()
    REGION_PREFERENCES = ('auto', 'uk-eu', 'us')
    
    # DCT thresholds (Europe rules also apply to unknown regions)
    DCT_WARN_EUROPE = int(os.getenv('DCT_WARN_EUROPE', '3'))
    DCT_HEAVY_EUROPE = int(os.getenv('DCT_HEAVY_EUROPE', '6'))
    DCT_WARN_US = int(os.getenv('DCT_WARN_US', '5'))
    DCT_HEAVY_US = int(os.getenv('DCT_HEAVY_US', '8'))
    
    # Route shape heuristics
    DIRECT_ROUTE_MIN_TOKENS = int(os.getenv('DIRECT_ROUTE_MIN_TOKENS', '6'))
    UK_LONG_ROUTE_TOKENS = int(os.getenv('UK_LONG_ROUTE_TOKENS', '8'))
    UK_BOUNDARY_SCAN_DEPTH = int(os.getenv('UK_BOUNDARY_SCAN_DEPTH', '12'))
    MAX_SPEED_LEVEL_TOKENS = int(os.getenv('MAX_SPEED_LEVEL_TOKENS', '2'))
    MIN_MEANINGFUL_TOKENS = int(os.getenv('MIN_MEANINGFUL_TOKENS', '3'))
    MAX_UNRECOGNIZED_LISTED = int(os.getenv('MAX_UNRECOGNIZED_LISTED', '8'))
    
    # Common UK FIR entry/exit fixes
    UK_BOUNDARY_FIXES = [f.strip().upper() for f in os.getenv(
        'UK_BOUNDARY_FIXES',
        'KONAN,KOK,DVR,MID,SFD,LAMSO,REDFA,TOPPA,RATSU,GODOS,SIRIC,BAKUR,'
        'NIGIT,LIFFY,DIKAS,ORTAC,SUXIN,PAAVO,TINAN,LESTA,VESAN,REMSI,TIGER,GOW'
    ).split(',') if f.strip()]
    
    @classmethod
    def dct_thresholds(cls, family: str) -> tuple[int, int]:
        """Return (warn, heavy) DCT thresholds for a region family."""
        if family == 'us':
            return cls.DCT_WARN_US, cls.DCT_HEAVY_US
        return cls.DCT_WARN_EUROPE, cls.DCT_HEAVY_EUROPE
    
    @classmethod
    def validate(cls):
        """Validate configuration."""
        if cls.DEFAULT_REGION not in cls.REGION_PREFERENCES:
            raise ValueError(f"DEFAULT_REGION must be one of {', '.join(cls.REGION_PREFERENCES)}")
        if cls.DCT_HEAVY_EUROPE <= cls.DCT_WARN_EUROPE:
            raise ValueError("DCT_HEAVY_EUROPE must be greater than DCT_WARN_EUROPE")
        if cls.DCT_HEAVY_US <= cls.DCT_WARN_US:
            raise ValueError("DCT_HEAVY_US must be greater than DCT_WARN_US")
        if not cls.UK_BOUNDARY_FIXES:
            raise ValueError("UK_BOUNDARY_FIXES configuration is required")
        return True
