"""
Service — HTTP surface for a renderer

- POST /archives (raw ZIP body) loads a batch and reports its status
- GET /session returns origin, positions, bounds and tile footprints
- GET /images/{name} and /tiles/{z}/{x}/{y} serve image and map tile bytes

Run:
    uvicorn service.server:app --port 8000
"""
