from apt_eval.server import main

raise SystemExit(main())
