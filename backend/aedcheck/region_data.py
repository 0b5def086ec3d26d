"""
AEDCheck Backend — Bundled Region / City Code Data
===================================================

What:  Default canonical code tables loaded by aedcheck.regions.
Why:   One place for the code space. Equipment rows store Korean labels
       (sido) and names (gugun); profiles and organizations store codes.

Regions: (code, short label, official label, kind, latitude, longitude)
Cities:  (city code, gugun name, region code, kind)

Override at deploy time with REGION_TABLE_PATH (JSON, same shape).
"""

REGIONS = (
    ("KR", "중앙", "중앙", "central", 37.5665, 126.9780),
    ("SEO", "서울", "서울특별시", "metropolitan", 37.5665, 126.9780),
    ("BUS", "부산", "부산광역시", "metropolitan", 35.1796, 129.0756),
    ("DAE", "대구", "대구광역시", "metropolitan", 35.8714, 128.6014),
    ("INC", "인천", "인천광역시", "metropolitan", 37.4563, 126.7052),
    ("GWA", "광주", "광주광역시", "metropolitan", 35.1595, 126.8526),
    ("DAJ", "대전", "대전광역시", "metropolitan", 36.3504, 127.3845),
    ("ULS", "울산", "울산광역시", "metropolitan", 35.5384, 129.3114),
    ("SEJ", "세종", "세종특별자치시", "special", 36.4800, 127.2890),
    ("GYE", "경기", "경기도", "province", 37.4138, 127.5183),
    ("GAN", "강원", "강원특별자치도", "special", 37.8228, 128.1555),
    ("CHB", "충북", "충청북도", "province", 36.6357, 127.4912),
    ("CHN", "충남", "충청남도", "province", 36.5184, 126.8000),
    ("JEB", "전북", "전북특별자치도", "special", 35.7175, 127.1530),
    ("JEN", "전남", "전라남도", "province", 34.8679, 126.9910),
    ("GYB", "경북", "경상북도", "province", 36.4919, 128.8889),
    ("GYN", "경남", "경상남도", "province", 35.4606, 128.2132),
    ("JEJ", "제주", "제주특별자치도", "special", 33.4890, 126.4983),
)

CITIES = (
    # 서울특별시
    ("11010", "종로구", "SEO", "district"),
    ("11020", "중구", "SEO", "district"),
    ("11030", "용산구", "SEO", "district"),
    ("11040", "성동구", "SEO", "district"),
    ("11050", "광진구", "SEO", "district"),
    ("11060", "동대문구", "SEO", "district"),
    ("11070", "중랑구", "SEO", "district"),
    ("11080", "성북구", "SEO", "district"),
    ("11090", "강북구", "SEO", "district"),
    ("11100", "도봉구", "SEO", "district"),
    ("11110", "노원구", "SEO", "district"),
    ("11120", "은평구", "SEO", "district"),
    ("11130", "서대문구", "SEO", "district"),
    ("11140", "마포구", "SEO", "district"),
    ("11150", "양천구", "SEO", "district"),
    ("11160", "강서구", "SEO", "district"),
    ("11170", "구로구", "SEO", "district"),
    ("11180", "금천구", "SEO", "district"),
    ("11190", "영등포구", "SEO", "district"),
    ("11200", "동작구", "SEO", "district"),
    ("11210", "관악구", "SEO", "district"),
    ("11220", "서초구", "SEO", "district"),
    ("11230", "강남구", "SEO", "district"),
    ("11240", "송파구", "SEO", "district"),
    ("11250", "강동구", "SEO", "district"),

    # 부산광역시
    ("21010", "중구", "BUS", "district"),
    ("21020", "서구", "BUS", "district"),
    ("21030", "동구", "BUS", "district"),
    ("21040", "영도구", "BUS", "district"),
    ("21050", "부산진구", "BUS", "district"),
    ("21060", "동래구", "BUS", "district"),
    ("21070", "남구", "BUS", "district"),
    ("21080", "북구", "BUS", "district"),
    ("21090", "해운대구", "BUS", "district"),
    ("21100", "사하구", "BUS", "district"),
    ("21110", "금정구", "BUS", "district"),
    ("21120", "강서구", "BUS", "district"),
    ("21130", "연제구", "BUS", "district"),
    ("21140", "수영구", "BUS", "district"),
    ("21150", "사상구", "BUS", "district"),
    ("21310", "기장군", "BUS", "county"),

    # 경기도 주요 시군
    ("31010", "수원시", "GYE", "city"),
    ("31020", "성남시", "GYE", "city"),
    ("31030", "의정부시", "GYE", "city"),
    ("31040", "안양시", "GYE", "city"),
    ("31050", "부천시", "GYE", "city"),
    ("31060", "광명시", "GYE", "city"),
    ("31070", "평택시", "GYE", "city"),
    ("31080", "동두천시", "GYE", "city"),
    ("31090", "안산시", "GYE", "city"),
    ("31100", "고양시", "GYE", "city"),
    ("31110", "과천시", "GYE", "city"),
    ("31120", "구리시", "GYE", "city"),
    ("31130", "남양주시", "GYE", "city"),
    ("31140", "오산시", "GYE", "city"),
    ("31150", "시흥시", "GYE", "city"),
    ("31160", "군포시", "GYE", "city"),
    ("31170", "의왕시", "GYE", "city"),
    ("31180", "하남시", "GYE", "city"),
    ("31190", "용인시", "GYE", "city"),
    ("31200", "파주시", "GYE", "city"),
    ("31210", "이천시", "GYE", "city"),
    ("31220", "안성시", "GYE", "city"),
    ("31230", "김포시", "GYE", "city"),
    ("31240", "화성시", "GYE", "city"),
    ("31250", "광주시", "GYE", "city"),
    ("31260", "양주시", "GYE", "city"),
    ("31270", "포천시", "GYE", "city"),
    ("31280", "여주시", "GYE", "city"),
    ("31350", "연천군", "GYE", "county"),
    ("31370", "가평군", "GYE", "county"),
    ("31380", "양평군", "GYE", "county"),

    # 대구광역시
    ("22010", "중구", "DAE", "district"),
    ("22020", "동구", "DAE", "district"),
    ("22030", "서구", "DAE", "district"),
    ("22040", "남구", "DAE", "district"),
    ("22050", "북구", "DAE", "district"),
    ("22060", "수성구", "DAE", "district"),
    ("22070", "달서구", "DAE", "district"),
    ("22310", "달성군", "DAE", "county"),
    ("22080", "군위군", "DAE", "county"),

    # 인천광역시
    ("23010", "중구", "INC", "district"),
    ("23020", "동구", "INC", "district"),
    ("23030", "미추홀구", "INC", "district"),
    ("23040", "연수구", "INC", "district"),
    ("23050", "남동구", "INC", "district"),
    ("23060", "부평구", "INC", "district"),
    ("23070", "계양구", "INC", "district"),
    ("23080", "서구", "INC", "district"),
    ("23310", "강화군", "INC", "county"),
    ("23320", "옹진군", "INC", "county"),

    # 광주광역시
    ("24010", "동구", "GWA", "district"),
    ("24020", "서구", "GWA", "district"),
    ("24030", "남구", "GWA", "district"),
    ("24040", "북구", "GWA", "district"),
    ("24050", "광산구", "GWA", "district"),

    # 대전광역시
    ("25010", "동구", "DAJ", "district"),
    ("25020", "중구", "DAJ", "district"),
    ("25030", "서구", "DAJ", "district"),
    ("25040", "유성구", "DAJ", "district"),
    ("25050", "대덕구", "DAJ", "district"),

    # 울산광역시
    ("26010", "중구", "ULS", "district"),
    ("26020", "남구", "ULS", "district"),
    ("26030", "동구", "ULS", "district"),
    ("26040", "북구", "ULS", "district"),
    ("26310", "울주군", "ULS", "county"),

    # 세종특별자치시
    ("29010", "세종시", "SEJ", "city"),

    # 강원특별자치도 주요 시군
    ("32010", "춘천시", "GAN", "city"),
    ("32020", "원주시", "GAN", "city"),
    ("32030", "강릉시", "GAN", "city"),
    ("32040", "동해시", "GAN", "city"),
    ("32050", "태백시", "GAN", "city"),
    ("32060", "속초시", "GAN", "city"),
    ("32070", "삼척시", "GAN", "city"),
    ("32310", "홍천군", "GAN", "county"),
    ("32320", "횡성군", "GAN", "county"),
    ("32330", "영월군", "GAN", "county"),
    ("32340", "평창군", "GAN", "county"),
    ("32350", "정선군", "GAN", "county"),
    ("32360", "철원군", "GAN", "county"),
    ("32370", "화천군", "GAN", "county"),
    ("32380", "양구군", "GAN", "county"),
    ("32390", "인제군", "GAN", "county"),
    ("32400", "고성군", "GAN", "county"),
    ("32410", "양양군", "GAN", "county"),

    # 충청북도 주요 시군
    ("33010", "청주시", "CHB", "city"),
    ("33020", "충주시", "CHB", "city"),
    ("33030", "제천시", "CHB", "city"),
    ("33320", "보은군", "CHB", "county"),
    ("33330", "옥천군", "CHB", "county"),
    ("33340", "영동군", "CHB", "county"),
    ("33350", "증평군", "CHB", "county"),
    ("33360", "진천군", "CHB", "county"),
    ("33370", "괴산군", "CHB", "county"),
    ("33380", "음성군", "CHB", "county"),
    ("33390", "단양군", "CHB", "county"),

    # 충청남도 주요 시군
    ("34010", "천안시", "CHN", "city"),
    ("34020", "공주시", "CHN", "city"),
    ("34030", "보령시", "CHN", "city"),
    ("34040", "아산시", "CHN", "city"),
    ("34050", "서산시", "CHN", "city"),
    ("34060", "논산시", "CHN", "city"),
    ("34070", "계룡시", "CHN", "city"),
    ("34080", "당진시", "CHN", "city"),
    ("34310", "금산군", "CHN", "county"),
    ("34330", "부여군", "CHN", "county"),
    ("34340", "서천군", "CHN", "county"),
    ("34350", "청양군", "CHN", "county"),
    ("34360", "홍성군", "CHN", "county"),
    ("34370", "예산군", "CHN", "county"),
    ("34380", "태안군", "CHN", "county"),

    # 전북특별자치도 주요 시군
    ("35010", "전주시", "JEB", "city"),
    ("35020", "군산시", "JEB", "city"),
    ("35030", "익산시", "JEB", "city"),
    ("35040", "정읍시", "JEB", "city"),
    ("35050", "남원시", "JEB", "city"),
    ("35060", "김제시", "JEB", "city"),
    ("35310", "완주군", "JEB", "county"),
    ("35320", "진안군", "JEB", "county"),
    ("35330", "무주군", "JEB", "county"),
    ("35340", "장수군", "JEB", "county"),
    ("35350", "임실군", "JEB", "county"),
    ("35360", "순창군", "JEB", "county"),
    ("35370", "고창군", "JEB", "county"),
    ("35380", "부안군", "JEB", "county"),

    # 전라남도 주요 시군
    ("36010", "목포시", "JEN", "city"),
    ("36020", "여수시", "JEN", "city"),
    ("36030", "순천시", "JEN", "city"),
    ("36040", "나주시", "JEN", "city"),
    ("36050", "광양시", "JEN", "city"),
    ("36310", "담양군", "JEN", "county"),
    ("36320", "곡성군", "JEN", "county"),
    ("36330", "구례군", "JEN", "county"),
    ("36340", "고흥군", "JEN", "county"),
    ("36350", "보성군", "JEN", "county"),
    ("36360", "화순군", "JEN", "county"),
    ("36370", "장흥군", "JEN", "county"),
    ("36380", "강진군", "JEN", "county"),
    ("36390", "해남군", "JEN", "county"),
    ("36400", "영암군", "JEN", "county"),
    ("36410", "무안군", "JEN", "county"),
    ("36420", "함평군", "JEN", "county"),
    ("36430", "영광군", "JEN", "county"),
    ("36440", "장성군", "JEN", "county"),
    ("36450", "완도군", "JEN", "county"),
    ("36460", "진도군", "JEN", "county"),
    ("36470", "신안군", "JEN", "county"),

    # 경상북도 주요 시군
    ("37010", "포항시", "GYB", "city"),
    ("37020", "경주시", "GYB", "city"),
    ("37030", "김천시", "GYB", "city"),
    ("37040", "안동시", "GYB", "city"),
    ("37050", "구미시", "GYB", "city"),
    ("37060", "영주시", "GYB", "city"),
    ("37070", "영천시", "GYB", "city"),
    ("37080", "상주시", "GYB", "city"),
    ("37090", "문경시", "GYB", "city"),
    ("37100", "경산시", "GYB", "city"),
    ("37310", "의성군", "GYB", "county"),
    ("37320", "청송군", "GYB", "county"),
    ("37330", "영양군", "GYB", "county"),
    ("37340", "영덕군", "GYB", "county"),
    ("37350", "청도군", "GYB", "county"),
    ("37360", "고령군", "GYB", "county"),
    ("37370", "성주군", "GYB", "county"),
    ("37380", "칠곡군", "GYB", "county"),
    ("37390", "예천군", "GYB", "county"),
    ("37400", "봉화군", "GYB", "county"),
    ("37410", "울진군", "GYB", "county"),
    ("37420", "울릉군", "GYB", "county"),

    # 경상남도 주요 시군
    ("38010", "창원시", "GYN", "city"),
    ("38020", "진주시", "GYN", "city"),
    ("38030", "통영시", "GYN", "city"),
    ("38040", "사천시", "GYN", "city"),
    ("38050", "김해시", "GYN", "city"),
    ("38060", "밀양시", "GYN", "city"),
    ("38070", "거제시", "GYN", "city"),
    ("38080", "양산시", "GYN", "city"),
    ("38310", "의령군", "GYN", "county"),
    ("38320", "함안군", "GYN", "county"),
    ("38330", "창녕군", "GYN", "county"),
    ("38340", "고성군", "GYN", "county"),
    ("38350", "남해군", "GYN", "county"),
    ("38360", "하동군", "GYN", "county"),
    ("38370", "산청군", "GYN", "county"),
    ("38380", "함양군", "GYN", "county"),
    ("38390", "거창군", "GYN", "county"),
    ("38400", "합천군", "GYN", "county"),

    # 제주특별자치도
    ("39010", "제주시", "JEJ", "city"),
    ("39020", "서귀포시", "JEJ", "city"),
)
