import json
import math
from unittest import TestCase

import numpy as np
from shapely.geometry import Point, shape

from spatialselect.constructs.buffer import Buffer, validate_radius, validate_resolution
from spatialselect.constructs.coordinate import Coordinate
from spatialselect.utils.exceptions import CRSMismatchError, InvalidParameterError


class TestBuffer(TestCase):
    def setUp(self):
        self.center = Coordinate.from_xy(500000.0, 4420000.0, 32618)

    def test_from_coordinate(self):
        buffer = Buffer.from_coordinate(self.center, 2000)

        self.assertEqual(buffer.crs.to_epsg(), 32618)
        self.assertEqual(buffer.radius, 2000.0)
        self.assertTrue(buffer.geometry.contains(self.center.geom))
        # inscribed polygon: slightly smaller than the true disk
        self.assertLess(buffer.geometry.area, math.pi * 2000**2)
        self.assertGreater(buffer.geometry.area, 0.99 * math.pi * 2000**2)

    def test_resolution_controls_vertex_count(self):
        coarse = Buffer.from_coordinate(self.center, 100, resolution=2)
        fine = Buffer.from_coordinate(self.center, 100, resolution=16)

        # four quarter circles plus the closing vertex
        self.assertEqual(len(coarse.geometry.exterior.coords), 4 * 2 + 1)
        self.assertEqual(len(fine.geometry.exterior.coords), 4 * 16 + 1)

    def test_intersects_counts_boundary_contact(self):
        buffer = Buffer.from_coordinate(self.center, 2000)

        self.assertTrue(buffer.intersects(Point(502000.0, 4420000.0)))
        self.assertTrue(buffer.intersects(Point(500000.0, 4420000.0)))
        self.assertFalse(buffer.intersects(Point(502001.0, 4420000.0)))

    def test_geographic_center_is_rejected(self):
        with self.assertRaises(CRSMismatchError):
            Buffer.from_coordinate(Coordinate.from_lat_lon(39.95, -75.16), 2000)

    def test_bad_parameters(self):
        with self.assertRaises(InvalidParameterError):
            Buffer.from_coordinate(self.center, 0)
        with self.assertRaises(InvalidParameterError):
            Buffer.from_coordinate(self.center, 100, resolution=1.5)

    def test_validate_radius(self):
        self.assertEqual(validate_radius(5), 5.0)
        self.assertIsInstance(validate_radius(5), float)
        with self.assertRaises(InvalidParameterError):
            validate_radius(False)

    def test_to_layer(self):
        layer = Buffer.from_coordinate(self.center, 2000).to_layer()

        self.assertEqual(len(layer), 1)
        self.assertEqual(layer.columns, ["radius"])
        self.assertEqual(layer.crs.to_epsg(), 32618)

    def test_to_geojson_is_lon_lat(self):
        buffer = Buffer.from_coordinate(self.center, 2000)

        geometry = shape(json.loads(buffer.to_geojson()))

        self.assertEqual(geometry.geom_type, "Polygon")
        # easting 500000 is the zone 18 central meridian, 75 degrees west
        self.assertAlmostEqual(geometry.centroid.x, -75.0, places=3)
        self.assertTrue(39.0 < geometry.centroid.y < 41.0)

    def test_numpy_scalars_are_accepted(self):
        self.assertEqual(validate_radius(np.float64(250.0)), 250.0)
        self.assertEqual(validate_resolution(np.int64(8)), 8)

        buffer = Buffer.from_coordinate(self.center, np.int64(100), resolution=np.int32(2))

        self.assertEqual(len(buffer.geometry.exterior.coords), 9)
