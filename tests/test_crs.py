from unittest import TestCase

from pyproj import CRS

from spatialselect.utils.crs import (
    LATLON_CRS,
    XY_CRS,
    as_crs,
    crs_equals,
    ensure_projected,
    estimate_utm_zone,
    transformer_between,
    utm_crs_for,
)
from spatialselect.utils.exceptions import CRSMismatchError
from spatialselect.utils.geo import reproject_xy


class TestCrs(TestCase):
    def test_as_crs(self):
        self.assertEqual(as_crs(4326), LATLON_CRS)
        self.assertEqual(as_crs("EPSG:3857"), XY_CRS)
        self.assertIs(as_crs(LATLON_CRS), LATLON_CRS)

    def test_as_crs_failures(self):
        for value in [None, "not a crs", "EPSG:0"]:
            with self.subTest(value=value):
                with self.assertRaises(CRSMismatchError):
                    as_crs(value)

    def test_crs_equals(self):
        self.assertTrue(crs_equals(CRS(32618), "EPSG:32618"))
        self.assertFalse(crs_equals(CRS(32618), CRS(26918)))
        self.assertFalse(crs_equals(None, None))
        self.assertFalse(crs_equals(LATLON_CRS, None))

    def test_ensure_projected(self):
        self.assertEqual(ensure_projected(32618).to_epsg(), 32618)
        with self.assertRaises(CRSMismatchError):
            ensure_projected(LATLON_CRS)
        with self.assertRaises(CRSMismatchError):
            ensure_projected(None)

    def test_transformer_between_undefined(self):
        with self.assertRaises(CRSMismatchError):
            transformer_between(None, LATLON_CRS)

    def test_estimate_utm_zone(self):
        self.assertEqual(estimate_utm_zone(-75.16522), 18)
        self.assertEqual(estimate_utm_zone(-180), 1)
        self.assertEqual(estimate_utm_zone(180), 60)

    def test_utm_crs_for(self):
        self.assertEqual(utm_crs_for(-75.16522, 39.95258).to_epsg(), 32618)
        self.assertEqual(utm_crs_for(151.2, -33.9).to_epsg(), 32756)

    def test_reproject_xy_keeps_xy_order(self):
        x, y = reproject_xy(-75.0, 40.0, LATLON_CRS, 32618)

        # on the central meridian the false easting is exact
        self.assertAlmostEqual(x, 500000.0, places=3)
        self.assertGreater(y, 4400000.0)

    def test_reproject_xy_rejects_non_finite_result(self):
        with self.assertRaises(CRSMismatchError):
            reproject_xy(float("inf"), 40.0, LATLON_CRS, 32618)
        with self.assertRaises(CRSMismatchError):
            reproject_xy(0.0, 91.0, LATLON_CRS, 32618)
