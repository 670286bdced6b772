"""Library Health core package.

Modules:
- classifier: metadata completeness rules
- scanner: single-flight library scan and subtitle acquisition
- store: JSON-file persistence of scan results
- catalog: catalog provider interface and JSON catalog adapter
- subtitles: subtitle provider interface and forced-track selection
- server: FastAPI app and Uvicorn runner
- config: INI parsing and config object
"""
