# -*- coding: utf-8 -*-
"""
Coordinate Projector - World, geodetic, and local-metric coordinates.

Composes a reference image's ``Georef`` affine with pyproj reprojection.

Coordinate flow:

    pixel (u, v)  --affine-->  native CRS (x, y)  --pyproj-->  WGS84 (lon, lat)
                                                        |
                          azimuthal equidistant  <------+------>  UTM zone

Local metric coordinates use an azimuthal-equidistant plane centred on an
origin pixel, which reports true distances from that origin without
committing the session to a single global projected CRS. All pyproj
transformers use ``always_xy=True`` so coordinates are ``(x, y)`` /
``(lon, lat)`` regardless of the CRS axis order.

Dependencies
------------
pyproj

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-14

Modified
--------
2026-10-16
"""

# Standard library
import logging
import math
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

# mapreg internal
from mapreg.exceptions import GeolocationError
from mapreg.geolocation._backend import require_projection_backend
from mapreg.geolocation.georef import Georef
from mapreg.vocabulary import ConversionMode, DatumPolicy

logger = logging.getLogger(__name__)

WGS84_CRS = 'EPSG:4326'
NAD83_2011_DATUM = 'NAD83(2011)'
NAD83_2011_NOTICE = 'Using NAD83(2011) UTM (no EPSG on this system)'

_AUTHORITY_CODE = re.compile(r'^\s*([A-Za-z]+):(\d+)\s*$')

XY = Tuple[float, float]


@dataclass
class CrsInfo:
    """Summary of a reference CRS for display.

    Attributes
    ----------
    name : str
        WKT keyword before the first ``[`` (e.g. ``'PROJCS'``), or the
        identifier itself.
    code : str, optional
        ``'EPSG:<n>'`` when the CRS text is an authority identifier.
    wkt : str, optional
        The CRS text as read.
    """

    name: str
    code: Optional[str] = None
    wkt: Optional[str] = None


@dataclass
class CrsSuggestion:
    """Suggested projected output CRS for a reference location."""

    epsg: Optional[str]
    proj: str
    name: str
    datum: str
    zone: int
    notice: Optional[str] = None


def describe_crs(crs_text: Optional[str]) -> CrsInfo:
    """Build a ``CrsInfo`` from CRS text; None gives ``'Unknown'``."""
    if crs_text is None:
        return CrsInfo(name='Unknown')
    stripped = crs_text.strip()
    match = _AUTHORITY_CODE.match(stripped)
    code = None
    if match:
        code = f"{match.group(1).upper()}:{match.group(2)}"
    name = stripped.split('[', 1)[0].strip() if '[' in stripped else stripped
    return CrsInfo(name=name or 'Unknown', code=code, wkt=crs_text)


def utm_zone(lon: float) -> int:
    """UTM zone number (1-60) containing longitude *lon*."""
    return min(max(int(math.floor((lon + 180.0) / 6.0)) + 1, 1), 60)


def suggest_utm_crs(lon: float, lat: float, policy: DatumPolicy) -> CrsSuggestion:
    """UTM CRS for a geodetic location under a datum policy.

    WGS84 gives the EPSG code ``326zz`` (north) or ``327zz`` (south).
    NAD83(2011) has no EPSG UTM code here and is returned as a GRS80
    proj string with a notice.
    """
    zone = utm_zone(lon)
    north = lat >= 0.0
    hemisphere = 'N' if north else 'S'
    south = '' if north else ' +south'
    if policy is DatumPolicy.NAD83_2011:
        return CrsSuggestion(
            epsg=None,
            proj=(f"+proj=utm +zone={zone}{south} +ellps=GRS80 "
                  f"+units=m +no_defs +type=crs"),
            name=f"{NAD83_2011_DATUM} / UTM zone {zone}{hemisphere}",
            datum=NAD83_2011_DATUM,
            zone=zone,
            notice=NAD83_2011_NOTICE,
        )
    return CrsSuggestion(
        epsg=f"EPSG:{326 if north else 327}{zone:02d}",
        proj=(f"+proj=utm +zone={zone}{south} +datum=WGS84 "
              f"+units=m +no_defs +type=crs"),
        name=f"WGS84 / UTM zone {zone}{hemisphere}",
        datum='WGS84',
        zone=zone,
    )


def local_plane_crs(lon0: float, lat0: float) -> str:
    """Azimuthal-equidistant proj string centred on ``(lon0, lat0)``."""
    return (f"+proj=aeqd +lat_0={lat0!r} +lon_0={lon0!r} "
            f"+datum=WGS84 +units=m +no_defs +type=crs")


def _transform(transformer, x: float, y: float) -> XY:
    # pyproj returns inf on failure unless errcheck is set.
    import pyproj
    try:
        tx, ty = transformer.transform(x, y, errcheck=True)
    except pyproj.exceptions.ProjError as e:
        raise GeolocationError(f"reprojection failed: {e}") from e
    if not (math.isfinite(tx) and math.isfinite(ty)):
        raise GeolocationError(f"reprojection of ({x}, {y}) is not finite")
    return float(tx), float(ty)


def _transformer(src: str, dst: str):
    import pyproj
    try:
        return pyproj.Transformer.from_crs(
            pyproj.CRS.from_user_input(src),
            pyproj.CRS.from_user_input(dst),
            always_xy=True,
        )
    except pyproj.exceptions.CRSError as e:
        raise GeolocationError(f"invalid CRS: {e}") from e


class CoordinateProjector:
    """Project reference-image pixels into world and metric coordinates.

    Parameters
    ----------
    georef : Georef
        Reference image georeferencing. Queries that need a CRS return
        None when ``georef.crs`` is None.

    Raises
    ------
    DependencyError
        If pyproj is not installed.
    GeolocationError
        If the georef CRS text cannot be interpreted by pyproj.

    Examples
    --------
    >>> georef = Georef((10.0, 0.0, 0.0, -10.0, 500000.0, 4649776.0),
    ...                 crs='EPSG:32633')
    >>> projector = CoordinateProjector(georef)
    >>> lon, lat = projector.pixel_to_lonlat(0, 0)
    >>> projector.metric_scale_at(0, 0)  # close to 10 m/px
    """

    def __init__(self, georef: Georef) -> None:
        require_projection_backend()
        self._georef = georef
        self._to_lonlat = None
        if georef.crs is not None:
            self._to_lonlat = _transformer(georef.crs, WGS84_CRS)

    @property
    def georef(self) -> Georef:
        return self._georef

    @property
    def has_crs(self) -> bool:
        return self._to_lonlat is not None

    def pixel_to_world(self, u: float, v: float) -> XY:
        """Native CRS coordinate of pixel ``(u, v)``; no CRS needed."""
        x, y = self._georef.pixel_to_world(float(u), float(v))
        return float(x), float(y)

    def pixel_to_lonlat(self, u: float, v: float) -> Optional[XY]:
        """WGS84 ``(lon, lat)`` of pixel ``(u, v)``, or None without a CRS."""
        if self._to_lonlat is None:
            return None
        x, y = self.pixel_to_world(u, v)
        return _transform(self._to_lonlat, x, y)

    def pixel_to_local_meters(
        self,
        px: Sequence[float],
        origin_px: Sequence[float],
    ) -> Optional[XY]:
        """Metres east/north of *origin_px* on a local tangent plane.

        Parameters
        ----------
        px : Sequence[float]
            Target pixel ``(u, v)``.
        origin_px : Sequence[float]
            Pixel at the plane's centre.

        Returns
        -------
        Tuple[float, float] or None
            ``(east, north)`` in metres; None when no CRS is known.
        """
        if self._to_lonlat is None:
            return None
        lon0, lat0 = self.pixel_to_lonlat(origin_px[0], origin_px[1])
        lon, lat = self.pixel_to_lonlat(px[0], px[1])
        to_local = _transformer(WGS84_CRS, local_plane_crs(lon0, lat0))
        return _transform(to_local, lon, lat)

    def suggest_output_crs(
        self,
        u: float,
        v: float,
        policy: DatumPolicy = DatumPolicy.WGS84,
    ) -> Optional[CrsSuggestion]:
        """UTM CRS suggestion for the geodetic location of pixel ``(u, v)``."""
        lonlat = self.pixel_to_lonlat(u, v)
        if lonlat is None:
            return None
        return suggest_utm_crs(lonlat[0], lonlat[1], policy)

    def pixel_to_utm(
        self,
        u: float,
        v: float,
        policy: DatumPolicy = DatumPolicy.WGS84,
    ) -> Optional[XY]:
        """UTM easting/northing of pixel ``(u, v)`` in its own zone."""
        lonlat = self.pixel_to_lonlat(u, v)
        if lonlat is None:
            return None
        suggestion = suggest_utm_crs(lonlat[0], lonlat[1], policy)
        target = suggestion.epsg or suggestion.proj
        return _transform(_transformer(WGS84_CRS, target), *lonlat)

    def metric_scale_at(self, u: float, v: float) -> Optional[float]:
        """Local metres per pixel at ``(u, v)``.

        Mean distance covered on the local plane by a one-pixel step along
        ``u`` and along ``v``. None without a CRS.
        """
        if self._to_lonlat is None:
            return None
        origin = (u, v)
        e_u, n_u = self.pixel_to_local_meters((u + 1.0, v), origin)
        e_v, n_v = self.pixel_to_local_meters((u, v + 1.0), origin)
        e_0, n_0 = self.pixel_to_local_meters(origin, origin)
        du = math.hypot(e_u - e_0, n_u - n_0)
        dv = math.hypot(e_v - e_0, n_v - n_0)
        return 0.5 * (du + dv)

    def convert(
        self,
        mode: ConversionMode,
        u: float,
        v: float,
        policy: DatumPolicy = DatumPolicy.WGS84,
        origin_px: Optional[Sequence[float]] = None,
    ) -> Optional[XY]:
        """Coordinate of pixel ``(u, v)`` under a conversion mode.

        ``LOCAL_METERS`` measures from *origin_px* (pixel ``(0, 0)`` when
        omitted). ``PIXEL`` returns the input unchanged.
        """
        if mode is ConversionMode.PIXEL:
            return float(u), float(v)
        if mode is ConversionMode.LONLAT:
            return self.pixel_to_lonlat(u, v)
        if mode is ConversionMode.LOCAL_METERS:
            origin = origin_px if origin_px is not None else (0.0, 0.0)
            return self.pixel_to_local_meters((u, v), origin)
        return self.pixel_to_utm(u, v, policy)
