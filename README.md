# meshviewer

The logic behind an interactive 3D model viewer, kept apart from any
windowing or graphics API. It loads Wavefront OBJ meshes, prepares their
vertex data for rendering and holds the state a viewer window needs from one
frame to the next.

## Modules

### `meshviewer.mesh`

- `parse_obj(text, mtl_search_path)` reads OBJ text into an `ObjData`
  (positions, normals, texture coordinates, triangulated shapes, materials
  and warnings). Polygons are split into triangle fans, negative indices
  count from the end, and `mtllib` files are read from `mtl_search_path`. A
  missing material file adds a warning, and bad numbers or out-of-range
  indices raise `ModelLoadError`.
- `parse_mtl(text)` returns a list of `Material` objects: ambient, diffuse
  and specular colours, shininess, and the diffuse, normal and bump texture
  names.
- `Model.load_from_file(path, standardize)` builds an indexed mesh. Vertices
  that are equal in position, normal and texture coordinate (within float32
  epsilon) are merged. Colours and shininess come from the first material,
  or default to `Ka = 0.1`, `Kd = 0.7`, `Ks = 1.0` and shininess 25. With
  `standardize` the mesh is centred at the origin and scaled so its
  bounding-box diagonal is 2. Normals are computed with `compute_normals`
  when the file has none; tangents, with handedness in `w`, are computed
  with `compute_tangents` when texture coordinates are present. A file that
  cannot be read or parsed raises `ModelLoadError`.
- `load_diffuse_texture`, `load_normal_texture` and `load_cube_texture`
  record texture paths on the model when the files exist; the cube map is
  six `posx.jpg` … `negz.jpg` faces following a path prefix.
- `num_triangles()` and `index_count(num_triangles)` give the triangle count
  and the number of indices to draw (all of them for a negative count).
- `Vertex` is the merged vertex type; `Model.vertices` lists them.

### `meshviewer.trackball`

- `TrackBall` turns mouse drags (`mouse_press`, `mouse_move`,
  `mouse_release`) on a viewport (`resize_viewport`) into rotations on a unit
  hemisphere. `rotation()` returns the current 4×4 matrix; after the mouse is
  released the trackball keeps spinning about its last axis at its last
  angular velocity, capped at 0.72 degrees per millisecond.
- `ElapsedTimer` measures elapsed seconds and can take any clock function.
- `rotation_matrix(angle, axis)` builds a 4×4 rotation about an axis.

### `meshviewer.filebrowser`

`FileBrowser` models a file-selection dialog. It lists a directory
(`set_pwd`; `..` first, then directories, then files, each sorted by name),
filters files by extension (`set_type_filters`,
`set_current_type_filter_index`, `is_extension_matched`; `".*"` matches
everything and several filters get a combined filter in front) and hides
names starting with `$` in `visible_records()`. User actions are methods:
`click` (with `multi_select` for Ctrl/Shift), `double_click`,
`enter_filename`, `create_directory`, `confirm` and `cancel`. Once a choice
is confirmed, `has_selected()` is true and `selected()` or
`multi_selected()` give the chosen paths. Behaviour is tuned with
`FileBrowserFlags` (`SELECT_DIRECTORY`, `ENTER_NEW_FILENAME`,
`CREATE_NEW_DIR`, `MULTIPLE_SELECTION` and others). A listing that fails
sets the status text and falls back to the working directory.

### `meshviewer.viewer`

`ViewerState` ties the parts together: a model trackball and a light
trackball (`handle_mouse_button` with `"left"` or `"right"`,
`handle_mouse_motion`), wheel zoom clamped to [-1.5, 1]
(`handle_mouse_wheel`), a perspective or orthographic `Projection`
(`set_projection`), shader choice among `SHADER_NAMES` (`select_shader`) and
the UV `MappingMode`, which `load_model` sets to "from mesh" for meshes with
texture coordinates and to triplanar otherwise. `update()` refreshes the
model and view matrices, and `uniforms()` returns the values a renderer
would upload each frame. `draws_skybox()` and `shows_light_window()` say
which extras the current shader uses. The helpers `perspective`, `ortho`,
`look_at` and `normal_matrix` produce the matrices.

## Example

```python
from meshviewer.filebrowser import FileBrowser
from meshviewer.viewer import ViewerState

browser = FileBrowser()
browser.set_type_filters([".obj"])
browser.set_pwd("assets")

state = ViewerState("assets")
state.resize(600, 600)
state.load_model("assets/bunny.obj")
state.update()
frame = state.uniforms()
```

Matrices and vectors are NumPy arrays in column-vector convention, so a
point is transformed as `matrix @ point`.

## What it does not do

The package opens no window, draws nothing and has no command to run. It
does not compile shaders, upload buffers or decode images: textures are
kept as file paths, and `uniforms()` only computes the values a renderer
would need.

## Requirements

Python 3.10 or later and NumPy.