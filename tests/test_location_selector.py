from unittest import TestCase

import geopandas as gpd
from shapely.geometry import Point, box

from spatialselect.constructs.layer import GeometryLayer
from spatialselect.selectors.location import LocationSelector
from spatialselect.utils.exceptions import CRSMismatchError, InvalidParameterError

X0, Y0 = 485000.0, 4422000.0


class TestLocationSelector(TestCase):
    def setUp(self):
        self.mask = GeometryLayer(
            gpd.GeoDataFrame(
                {"GEOID10": ["a", "b"]},
                geometry=[
                    box(X0, Y0, X0 + 100, Y0 + 100),
                    box(X0 + 1000, Y0, X0 + 1100, Y0 + 100),
                ],
                crs="EPSG:32618",
            )
        )
        self.points = GeometryLayer(
            gpd.GeoDataFrame(
                {"objectid": [1, 2, 3, 4]},
                geometry=[
                    Point(X0 + 50, Y0 + 50),
                    Point(X0 + 100, Y0 + 50),
                    Point(X0 + 500, Y0 + 50),
                    Point(X0 + 1050, Y0 + 50),
                ],
                index=[40, 30, 20, 10],
                crs="EPSG:32618",
            )
        )

    def test_intersects_is_default(self):
        selected = LocationSelector(self.mask).select(self.points)

        self.assertEqual(selected.index.tolist(), [40, 30, 10])

    def test_within_excludes_boundary(self):
        selected = LocationSelector(self.mask, predicate="within").select(self.points)

        self.assertEqual(selected.index.tolist(), [40, 10])

    def test_touches(self):
        selected = LocationSelector(self.mask, predicate="touches").select(self.points)

        self.assertEqual(selected.index.tolist(), [30])

    def test_mask_is_reprojected(self):
        points = self.points.drop([30])
        mask = self.mask.to_crs(4326)

        selected = LocationSelector(mask, predicate="within").select(points)

        self.assertEqual(selected.index.tolist(), [40, 10])
        self.assertEqual(selected.crs.to_epsg(), 32618)

    def test_empty_mask(self):
        empty = self.mask.subset([False, False])

        selected = LocationSelector(empty).select(self.points)

        self.assertTrue(selected.is_empty)

    def test_unsupported_predicate(self):
        with self.assertRaises(InvalidParameterError):
            LocationSelector(self.mask, predicate="near")

    def test_undefined_crs(self):
        layer = GeometryLayer(gpd.GeoDataFrame(geometry=[Point(0, 0)]))

        with self.assertRaises(CRSMismatchError):
            LocationSelector(self.mask).select(layer)
        with self.assertRaises(CRSMismatchError):
            LocationSelector(layer).select(self.points)
