"""Fixed parameters: Poseidon2 round constants and storage geometry."""

POSEIDON2_W16_D5_ROUNDS_F = 8
POSEIDON2_W16_D5_ROUNDS_P = 14

POSEIDON2_W16_D5_EXTERNAL_CONSTANTS: tuple[tuple[int, ...], ...] = (
    (1428922684, 2022196109, 1224505130, 984282662,
     1745528643, 1884925147, 1845326973, 976109012,
     364320740, 1169816424, 1266509633, 1147500482,
     804946803, 1336891277, 1923680287, 1051112063),
    (617202902, 1328322895, 809658739, 728996169,
     367124292, 1183101044, 2017892963, 797916161,
     1689484235, 1657723214, 1725191991, 607916694,
     304711241, 991633463, 1341032671, 1455985172),
    (940327040, 1836866420, 1744330360, 1728313833,
     1256787822, 143243872, 394906775, 93462334,
     2095314515, 1438973973, 1925653183, 1615496024,
     772213231, 1188568581, 411016683, 452512591),
    (913633223, 1119952228, 2147150098, 1631257849,
     722026530, 51210008, 669586161, 391858424,
     1872572836, 1530649179, 1905358042, 712337723,
     273042458, 143817816, 2105695752, 418301610),
    (760850064, 724582512, 1175911295, 1686822328,
     1838736009, 1027362987, 45299051, 326225160,
     1722439737, 202954879, 433482402, 717784287,
     957447280, 2072056797, 1476433164, 1961211085),
    (1402211604, 2047616321, 1725105359, 1403872103,
     636199198, 711763034, 755524500, 1146269098,
     440942860, 172467545, 1346808457, 680815102,
     1145397703, 493957525, 1518357280, 811756323),
    (1599785888, 384859669, 1834738991, 349292068,
     1562910107, 469337841, 854962023, 1219794154,
     614870544, 533548718, 764382489, 609018108,
     1175651676, 533401582, 208843075, 346968022),
    (135087855, 1018564082, 356040847, 6921173,
     865613739, 1401029826, 1157587805, 1694194150,
     1896880238, 88368571, 1349348652, 2027358192,
     380015572, 1749008219, 245097507, 345502684),
)

POSEIDON2_W16_D5_INTERNAL_CONSTANTS: tuple[int, ...] = (
    1868136170, 1684664724, 983679023, 1891357693,
    1891456615, 476121283, 1059854491, 1061508892,
    272841724, 1160904394, 1037633668, 1955898504,
    892602345, 2104815485,
)

# Development storage configuration.
STORAGE_THRESHOLD = 4
BLOWUP_FACTOR = 4

NUM_NODES = STORAGE_THRESHOLD * BLOWUP_FACTOR

LOG_CLUSTER_SIZE = 20
LOG_FRAGMENT_SIZE = 22
LOG_SEGMENT_SIZE = 28
LOG_VOLUME_SIZE = 37

CLUSTER_SIZE = 1 << LOG_CLUSTER_SIZE
FRAGMENT_SIZE = 1 << LOG_FRAGMENT_SIZE
SEGMENT_SIZE = 1 << LOG_SEGMENT_SIZE
VOLUME_SIZE = 1 << LOG_VOLUME_SIZE