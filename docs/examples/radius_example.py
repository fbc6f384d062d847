"""
# Radius Selection Example

An example of using the RadiusSelector to find the census tracts within walking distance of Philadelphia City Hall
"""


def main():
    from spatialselect import package_root

    """
    First, we load the census tracts.
    The spatialselect package ships a small sample of Philadelphia tracts, median household incomes and shooting locations that we can use for demonstration.

    Vector files are read with `read_layer`, which picks the driver from the file extension (GeoPackage, Shapefile or GeoJSON):
    """

    from spatialselect.io.vector import read_layer

    tracts = read_layer(package_root() / "resources/philadelphia/tracts.geojson")
    print(tracts)

    """
    Each row of a GeometryLayer is a feature: one polygon plus its attributes.
    The tracts come in the EPSG:4326 lat/lon coordinate reference system.

    Next, let's attach the median household income to each tract.
    The income table is keyed by the census GEOID, which we read as a string so that it matches the tract's GEOID10 column:
    """

    import pandas as pd

    income = pd.read_csv(
        package_root() / "resources/philadelphia/income.csv",
        dtype={"GEOID": str},
    )

    from spatialselect.ops.join import attribute_join

    tracts = attribute_join(tracts, income, left_on="GEOID10", right_on="GEOID", how="left")

    """
    We used a left join so every tract is kept, even the ones without an income record; those get a missing value.
    An inner join (the default) would drop them instead.

    Buffers and distances only make sense in a projected coordinate reference system, where units are meters rather than degrees.
    `to_projected` picks the UTM zone that covers the center of the layer, which is zone 18N (EPSG:32618) for Philadelphia:
    """

    tracts = tracts.to_projected()
    print(tracts.crs)

    """
    Now let's load the shootings. They come as a plain csv file with `lat` and `lng` columns, so we tell `from_csv` which columns hold the coordinates:
    """

    from spatialselect.constructs.layer import GeometryLayer

    shootings = GeometryLayer.from_csv(
        package_root() / "resources/philadelphia/shootings.csv",
        x_column="lng",
        y_column="lat",
    )

    """
    To summarize the shootings per tract we count the points that fall inside each polygon.
    The points are reprojected into the tract CRS automatically, and every tract gets a count, zero included:
    """

    from spatialselect.ops.aggregate import (
        aggregate_points_in_polygons,
        count_points_in_polygons,
    )

    tracts = count_points_in_polygons(shootings, tracts, column="shootings")
    tracts = aggregate_points_in_polygons(
        shootings, tracts, "fatal", aggfunc="sum", column="fatal_shootings"
    )
    print(tracts.to_geo_dataframe()[["GEOID10", "medHHinc", "shootings", "fatal_shootings"]])

    """
    Finally, we're ready for the radius selection.
    We build the center as a lat/lon coordinate; the selector reprojects it into the CRS of the tracts before buffering:
    """

    from spatialselect.constructs.coordinate import Coordinate
    from spatialselect.selectors.radius import RadiusSelector

    city_hall = Coordinate.from_lat_lon(39.95258, -75.16522, coordinate_id="city hall")

    selector = RadiusSelector(city_hall, radius_meters=2000)

    nearby = selector.select(tracts)
    print(nearby.to_geo_dataframe()[["GEOID10", "medHHinc", "shootings"]])

    """
    Every tract that touches the 2 km circle is selected, in its original order and with all of its attributes.
    The geometries are not clipped to the circle.

    We can look at the circle itself by asking the selector for the buffer it uses:
    """

    buffer = selector.buffer_for(tracts)
    print(buffer.geometry.area / 1e6, "square kilometers")

    """
    If the tracts had stayed in lat/lon we would need to give the selector a projected CRS to work in, since it refuses to buffer in degrees:
    """

    latlon_tracts = tracts.to_crs(4326)
    nearby = RadiusSelector(city_hall, 2000, working_crs=32618).select(latlon_tracts)

    """
    Lastly, we might want to save the selection for use in a desktop GIS:
    """

    import tempfile
    from pathlib import Path

    with tempfile.TemporaryDirectory() as tmpdir:
        path = nearby.to_file(Path(tmpdir) / "tracts_near_city_hall.gpkg")
        print(read_layer(path))


if __name__ == "__main__":
    main()
