import tempfile
from pathlib import Path
from unittest import TestCase

import geopandas as gpd
import pandas as pd
from shapely.geometry import Point, box

from spatialselect.constructs.layer import GeometryLayer
from spatialselect.utils.exceptions import (
    CRSMismatchError,
    InvalidParameterError,
    LoadError,
)


class TestGeometryLayer(TestCase):
    def setUp(self):
        self.frame = gpd.GeoDataFrame(
            {"GEOID": ["a", "b", "c"], "pop": [10, 20, 30]},
            geometry=[box(0, 0, 1, 1), box(1, 0, 2, 1), box(2, 0, 3, 1)],
            crs="EPSG:32618",
        )
        self.layer = GeometryLayer(self.frame)

    def test_basic_properties(self):
        self.assertEqual(len(self.layer), 3)
        self.assertEqual(self.layer.columns, ["GEOID", "pop"])
        self.assertEqual(self.layer.crs.to_epsg(), 32618)
        self.assertEqual(self.layer.index.tolist(), [0, 1, 2])
        self.assertFalse(self.layer.is_empty)
        self.assertEqual(self.layer.feature(1)["GEOID"], "b")

    def test_requires_geo_dataframe(self):
        with self.assertRaises(TypeError):
            GeometryLayer(pd.DataFrame({"a": [1]}))

    def test_duplicate_index_is_rejected(self):
        frame = self.frame.set_index(pd.Index([0, 0, 1]))

        with self.assertRaises(IndexError):
            GeometryLayer(frame)

    def test_getitem_is_positional(self):
        self.assertEqual(self.layer[1].index.tolist(), [1])
        self.assertEqual(self.layer[0:2].index.tolist(), [0, 1])

    def test_from_geo_dataframe_copies(self):
        layer = GeometryLayer.from_geo_dataframe(self.frame)
        self.frame.loc[0, "pop"] = 999

        self.assertEqual(layer.feature(0)["pop"], 10)

    def test_from_geo_dataframe_assigns_missing_crs(self):
        frame = gpd.GeoDataFrame(geometry=[Point(0, 0)])

        layer = GeometryLayer.from_geo_dataframe(frame, crs=4326)

        self.assertEqual(layer.crs.to_epsg(), 4326)

    def test_to_geo_dataframe_is_a_copy(self):
        frame = self.layer.to_geo_dataframe()
        frame["pop"] = 0

        self.assertEqual(self.layer.feature(2)["pop"], 30)

    def test_from_dataframe(self):
        df = pd.DataFrame({"id": [1, 2], "lat": [39.95, 39.96], "lng": [-75.16, -75.15]})

        layer = GeometryLayer.from_dataframe(df, x_column="lng", y_column="lat")

        self.assertEqual(layer.crs.to_epsg(), 4326)
        self.assertEqual(layer.columns, ["id", "lat", "lng"])
        self.assertEqual(layer.feature(0)["geometry"], Point(-75.16, 39.95))

    def test_from_dataframe_missing_columns(self):
        df = pd.DataFrame({"id": [1], "lat": [39.95]})

        with self.assertRaises(InvalidParameterError):
            GeometryLayer.from_dataframe(df, x_column="lng", y_column="lat")

    def test_from_csv(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "points.csv"
            pd.DataFrame({"latitude": [39.95], "longitude": [-75.16], "fatal": [0]}).to_csv(
                path, index=False
            )

            layer = GeometryLayer.from_csv(path)

        self.assertEqual(len(layer), 1)
        self.assertEqual(layer.feature(0)["fatal"], 0)

    def test_from_csv_failures(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(LoadError):
                GeometryLayer.from_csv(Path(tmpdir) / "missing.csv")

            txt = Path(tmpdir) / "points.txt"
            txt.write_text("latitude,longitude\n1,2\n")
            with self.assertRaises(LoadError):
                GeometryLayer.from_csv(txt)

            no_coords = Path(tmpdir) / "no_coords.csv"
            no_coords.write_text("a,b\n1,2\n")
            with self.assertRaises(LoadError):
                GeometryLayer.from_csv(no_coords)

    def test_to_crs(self):
        latlon = self.layer.to_crs(4326)

        self.assertEqual(latlon.crs.to_epsg(), 4326)
        self.assertEqual(self.layer.crs.to_epsg(), 32618)
        self.assertEqual(latlon.index.tolist(), self.layer.index.tolist())
        self.assertIs(self.layer.to_crs("EPSG:32618"), self.layer)

    def test_to_crs_undefined(self):
        layer = GeometryLayer(gpd.GeoDataFrame(geometry=[Point(0, 0)]))

        with self.assertRaises(CRSMismatchError):
            layer.to_crs(4326)

    def test_to_projected(self):
        frame = gpd.GeoDataFrame(
            geometry=[Point(-75.16522, 39.95258), Point(-75.15, 39.96)], crs=4326
        )

        projected = GeometryLayer(frame).to_projected()

        self.assertEqual(projected.crs.to_epsg(), 32618)

    def test_to_projected_empty(self):
        with self.assertRaises(InvalidParameterError):
            GeometryLayer(self.frame.iloc[0:0]).to_projected()

    def test_subset(self):
        subset = self.layer.subset([True, False, True])

        self.assertEqual(subset.index.tolist(), [0, 2])
        self.assertEqual(len(self.layer), 3)

    def test_subset_wrong_length(self):
        with self.assertRaises(InvalidParameterError):
            self.layer.subset([True])

    def test_drop(self):
        self.assertEqual(self.layer.drop([1]).index.tolist(), [0, 2])
