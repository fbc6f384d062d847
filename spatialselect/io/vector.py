"""
Vector file reading and writing.

Layers are read and written through geopandas; the driver is chosen from the
file extension. Reading failures surface as LoadError and writing refuses to
replace an existing target unless asked to.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Optional, Union

from geopandas import list_layers, read_file

from spatialselect.constructs.layer import GeometryLayer
from spatialselect.utils.exceptions import LoadError

log = logging.getLogger(__name__)

# Supported file extensions and their OGR drivers
VECTOR_DRIVERS = {
    ".gpkg": "GPKG",
    ".shp": "ESRI Shapefile",
    ".geojson": "GeoJSON",
    ".json": "GeoJSON",
}

# Files that make up one shapefile dataset next to the .shp
SHAPEFILE_SIDECARS = (".shx", ".dbf", ".prj", ".cpg", ".qix", ".sbn", ".sbx")


def _supported() -> str:
    return ", ".join(VECTOR_DRIVERS.keys())


def read_layer(
    path: Union[str, Path],
    layer: Optional[str] = None,
) -> GeometryLayer:
    """
    Load a vector file into a GeometryLayer.

    A shapefile may be given either as the .shp file or as the directory that
    holds it, the way shapefiles are usually distributed.

    Args:
        path: Path to a GeoPackage, Shapefile, GeoJSON file, or a directory
            containing exactly one shapefile
        layer: Layer name for multi-layer formats (e.g., GeoPackage). If not
            specified, the first layer is read.

    Returns:
        A new GeometryLayer with every attribute of the source

    Raises:
        LoadError: If the path does not exist, the format is not supported, or
            the driver cannot read the source

    Examples:
        >>> tracts = read_layer('data/PhillyTractsUTM')
        >>> tracts = read_layer('data/tracts.gpkg', layer='census_tracts')
    """
    path = Path(path)

    if not path.exists():
        raise LoadError(f"vector source not found: {path}")

    if path.is_dir():
        shapefiles = sorted(path.glob("*.shp"))
        if len(shapefiles) != 1:
            raise LoadError(
                f"expected exactly one shapefile in {path} but found {len(shapefiles)}"
            )
        path = shapefiles[0]

    ext = path.suffix.lower()
    if ext not in VECTOR_DRIVERS:
        raise LoadError(
            f"Unsupported vector format: {ext}. Supported formats: {_supported()}"
        )

    read_kwargs = {}
    if layer is not None:
        read_kwargs["layer"] = layer

    try:
        frame = read_file(path, **read_kwargs)
    except (OSError, ValueError, RuntimeError) as e:
        raise LoadError(f"could not read vector source {path}: {e}") from e

    if frame.crs is None:
        log.warning(
            "%s has no crs information; operations that compare or reproject "
            "this layer will fail until a crs is assigned",
            path,
        )

    log.debug("read %d features from %s", len(frame), path)

    return GeometryLayer(frame)


def _existing_files(path: Path) -> list:
    files = [path] if path.exists() else []
    if path.suffix.lower() == ".shp":
        files += [
            path.with_suffix(s) for s in SHAPEFILE_SIDECARS if path.with_suffix(s).exists()
        ]
    return files


def _has_layer(path: Path, layer_name: str) -> bool:
    return layer_name in list_layers(path)["name"].tolist()


def _move_into_place(staging: Path, path: Path):
    """Move the files written under staging next to path and drop stale sidecars."""
    written = list(staging.iterdir())
    names = {f.name for f in written}
    for f in written:
        f.replace(path.parent / f.name)
    for f in _existing_files(path):
        if f.name not in names:
            f.unlink()


def write_layer(
    layer: GeometryLayer,
    path: Union[str, Path],
    overwrite: bool = False,
    layer_name: Optional[str] = None,
) -> Path:
    """
    Write a GeometryLayer to a vector file.

    The driver is selected from the file extension. Parent directories are created
    as needed. A new file is written next to the target first and only then moved
    over it, so a failed write leaves an existing target untouched.

    A GeoPackage holds several layers: with a layer_name, the layer is added to an
    existing .gpkg file and the other layers in it are kept. overwrite then applies
    to that layer only.

    Args:
        layer: The layer to write
        path: Output file path ending in .gpkg, .shp, .geojson or .json
        overwrite: Replace an existing file (and its shapefile sidecars), or an
            existing GeoPackage layer of the same name. Default is False.
        layer_name: Layer name for multi-layer formats (e.g., GeoPackage)

    Returns:
        The path that was written

    Raises:
        FileExistsError: If the target (or the named GeoPackage layer) exists and
            overwrite is False
        LoadError: If the extension is not a supported vector format

    Examples:
        >>> write_layer(selected, 'output/tracts_near_city_hall.gpkg')
        >>> write_layer(buffer.to_layer(), 'output/tracts_near_city_hall.gpkg', layer_name='buffer')
        >>> write_layer(selected, 'output/tracts_near_city_hall.shp', overwrite=True)
    """
    path = Path(path)

    ext = path.suffix.lower()
    if ext not in VECTOR_DRIVERS:
        raise LoadError(
            f"Cannot determine driver for extension: {ext}. Supported formats: {_supported()}"
        )

    write_kwargs = {"driver": VECTOR_DRIVERS[ext]}
    if layer_name is not None:
        write_kwargs["layer"] = layer_name

    frame = layer.to_geo_dataframe()

    if ext == ".gpkg" and layer_name is not None and path.exists():
        if not overwrite and _has_layer(path, layer_name):
            raise FileExistsError(
                f"{path} already has a layer named {layer_name!r}; "
                "pass overwrite=True to replace it"
            )
        # the driver replaces only the named layer
        frame.to_file(path, **write_kwargs)
        log.debug("wrote %d features to layer %s of %s", len(layer), layer_name, path)
        return path

    if _existing_files(path) and not overwrite:
        raise FileExistsError(
            f"{path} already exists; pass overwrite=True to replace it"
        )

    path.parent.mkdir(parents=True, exist_ok=True)

    staging = Path(tempfile.mkdtemp(prefix=f".{path.stem}-", dir=path.parent))
    try:
        frame.to_file(staging / path.name, **write_kwargs)
        _move_into_place(staging, path)
    finally:
        shutil.rmtree(staging, ignore_errors=True)

    log.debug("wrote %d features to %s", len(layer), path)

    return path
