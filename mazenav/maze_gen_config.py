width = 15
height = 15
algorithm = "dfs"  # "dfs" or "prim"
seed = 2025  # None for a different maze every run
cell_size = 1.0
dense_graph = False  # Set to True to place a graph node on every cell
output_dir = "maze_output"
save_visualization = False  # Set to True to save a matplotlib figure of the maze and route
