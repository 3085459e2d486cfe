"""Builders for segments and cameras placed at exact metre offsets"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from geopy.distance import geodesic

from transformers import CameraPoint, RoadSegment

# Near Ibn Gabirol / Arlozorov
ORIGIN = (32.08, 34.78)


def offset(east: float = 0.0, north: float = 0.0, origin=ORIGIN):
    """(lat, lng) of the point `east`/`north` metres from origin"""
    lat, lng = origin
    if north:
        p = geodesic(meters=abs(north)).destination((lat, lng), bearing=0 if north > 0 else 180)
        lat, lng = p.latitude, p.longitude
    if east:
        p = geodesic(meters=abs(east)).destination((lat, lng), bearing=90 if east > 0 else 270)
        lat, lng = p.latitude, p.longitude
    return lat, lng


def vertex(east: float, north: float):
    """(lng, lat) vertex as stored in segment paths"""
    lat, lng = offset(east, north)
    return (lng, lat)


def make_segment(
    segment_id,
    points=((0, 0), (0, 200)),
    street="אבן גבירול",
    from_street="",
    to_street="",
    direction="N",
    status="פעיל",
):
    """Segment through (east, north) metre offsets, in the given vertex order"""
    return RoadSegment(
        segment_id=segment_id,
        street_name=street,
        from_street=from_street,
        to_street=to_street,
        direction=direction,
        status=status,
        paths=(tuple(vertex(e, n) for e, n in points),),
    )


def make_camera(camera_id, east=0.0, north=0.0, street="אבן גבירול",
                house_number=None, status="פעיל", site_number=None):
    lat, lng = offset(east, north)
    return CameraPoint(
        camera_id=camera_id,
        lat=lat,
        lng=lng,
        street_name=street,
        house_number=house_number,
        status=status,
        name=f"camera {camera_id}",
        site_number=site_number,
    )
