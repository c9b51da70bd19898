"""
Fixture error taxonomy.

Routes translate these into HTTP responses; services never raise HTTPException.
"""


class FixtureError(Exception):
    """Base class for fixture scheduling errors"""

    status_code = 400


class FixtureAlreadyExistsError(FixtureError):
    """Matches already exist for the target zone(s); regeneration is never implicit"""

    status_code = 409

    def __init__(self, message: str = "A fixture has already been generated for this zone."):
        super().__init__(message)


class FixtureValidationError(FixtureError):
    """Caller-fixable precondition failure (teams, categories, zone state)"""

    status_code = 400


class FixtureNotFoundError(FixtureError):
    """Referenced zone, tournament, matchday or match does not exist"""

    status_code = 404


class FixtureGenerationError(FixtureError):
    """Unexpected failure while persisting a fixture; the transaction was rolled back"""

    status_code = 500

    def __init__(self, message: str = "Could not generate the fixture. Check the migrations and the related data."):
        super().__init__(message)
