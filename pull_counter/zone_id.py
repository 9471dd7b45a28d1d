"""Territory ids of the zones the boss catalog refers to."""


class ZoneId:
    """Game territory ids, as reported by ChangeZone records (hex in the log)."""
    MiddleLaNoscea = 134
    DeltascapeV10Savage = 691
    DeltascapeV20Savage = 692
    DeltascapeV30Savage = 693
    DeltascapeV40Savage = 694
    TheMinstrelsBalladShinryusDomain = 730
    TheUnendingCoilOfBahamutUltimate = 733
    SigmascapeV10Savage = 748
    SigmascapeV20Savage = 749
    SigmascapeV30Savage = 750
    SigmascapeV40Savage = 751
    TheJadeStoaExtreme = 758
    TheWeaponsRefrainUltimate = 777
    TheMinstrelsBalladTsukuyomisPain = 779
    AlphascapeV10Savage = 798
    AlphascapeV20Savage = 799
    AlphascapeV30Savage = 800
    AlphascapeV40Savage = 801
    HellsKierExtreme = 810
    TheWreathOfSnakesExtreme = 824
    TheBozjanSouthernFront = 920
    Zadnor = 975
